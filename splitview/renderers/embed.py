"""
Terminal display modes: inline PDF, inline image and download link.
"""

from ..fetcher import FetchResult
from ..state import Download, Embed
from .base import BaseRenderer, RenderContext

PRESENTATION_MESSAGE = 'PPT/PPTX files cannot be rendered directly. Please download to view.'
GENERIC_DOWNLOAD_MESSAGE = 'This file type is not directly renderable. Please download to view.'


class PDFRenderer(BaseRenderer):
    def render(self, result: FetchResult, context: RenderContext) -> Embed:
        return Embed('pdf', context.object_url(result, 'application/pdf'))


class ImageRenderer(BaseRenderer):
    def render(self, result: FetchResult, context: RenderContext) -> Embed:
        return Embed('image', context.object_url(result))


class DownloadRenderer(BaseRenderer):
    """Download link for anything that cannot be shown inline."""

    message = GENERIC_DOWNLOAD_MESSAGE

    def render(self, result: FetchResult, context: RenderContext) -> Download:
        return Download(context.object_url(result), self.message)


class PresentationRenderer(DownloadRenderer):
    message = PRESENTATION_MESSAGE
