"""Unified command-line interface for receiptsift.

Usage:
    receiptsift [-v] <command> ...
    receiptsift parse <file> [--json] [--config parser.toml]
    receiptsift scan <image> [--ocr-url URL] [--save-ocr] [--json]
    receiptsift serve [--host] [--port]
"""
