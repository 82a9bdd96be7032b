"""Uploader backends for one-picgo."""

from one_picgo.uploaders.base import Uploader
from one_picgo.uploaders.picgo import PicGoServerUploader

__all__ = ["Uploader", "PicGoServerUploader"]
