"""
Core modules for genmedia.

This package contains the provider-independent logic for:
- Configuration management
- Request/result types and size mapping
- Completion polling and vendor output decoding
- Provider adapters and the provider registry
"""
