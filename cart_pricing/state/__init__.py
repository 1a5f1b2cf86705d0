"""
Edit scheduling module.

Holds pending user edits keyed by (item id, field) until their quiet period
elapses.
"""
