"""Giffy: turn uploaded videos into GIFs and thumbnails with ffmpeg.

Requests flow through upload validation, per-request scratch artifacts and a
bounded ffmpeg runner; see :mod:`src.giffy.transcode.pipeline`.
"""
