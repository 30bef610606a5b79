"""Carts app package.

One shopping cart per user, created lazily on the first add. A product
appears at most once per cart; adding it again merges the quantities.
"""
