# Copyright (c) 2025 Trae AI. All rights reserved.


class UpstreamError(Exception):
    """
    A metadata or torrent service could not deliver what was asked for.
    """


class MetadataError(UpstreamError):
    pass


class TransmissionError(UpstreamError):
    pass
