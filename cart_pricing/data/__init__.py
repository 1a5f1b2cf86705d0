"""
Data models and payload parsing module.

Defines the immutable line item model and converts record source payloads
into canonical RawItem objects.
"""
