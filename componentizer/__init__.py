"""Build WebAssembly components from JavaScript functions and Rust guests."""

__version__ = "0.1.0"
