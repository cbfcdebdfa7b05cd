"""
Flickr Uploader

Uploads local images to Flickr. Keywords embedded in each image become Flickr
tags, configurable rules strip private keywords and add photos to albums, and a
ledger of uploaded files prevents the same image being uploaded twice.
"""

__version__ = "1.0.0"
