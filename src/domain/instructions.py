"""Builds a step's instructions as one self-contained HTML document."""

import base64

import markdown
from bs4 import BeautifulSoup
from loguru import logger

from domain.exceptions import ValidationError
from domain.models.problem import DOC_DIRECTORY

IMAGE_TYPES = {
    ".gif": "image/gif",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".svg": "image/svg+xml",
}

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]


class InstructionBuilder:
    """Renders ``_doc/index.html`` or ``_doc/index.md`` and inlines its images."""

    def __init__(self, doc_directory: str = DOC_DIRECTORY):
        self.doc_directory = doc_directory

    def __call__(self, files: dict[str, str]) -> str:
        return self.build(files)

    def build(self, files: dict[str, str]) -> str:
        """
        Build the instructions for one step.

        Args:
            files: The step's files, keyed by relative path

        Returns:
            Rendered HTML document

        Raises:
            ValidationError: If no index document exists or an image is missing
        """
        prefix = f"{self.doc_directory}/"
        used = {name: False for name in files if name.startswith(prefix)}

        html_name = f"{prefix}index.html"
        md_name = f"{prefix}index.md"
        if html_name in files:
            source = files[html_name]
            used[html_name] = True
        elif md_name in files:
            source = markdown.markdown(files[md_name], extensions=MARKDOWN_EXTENSIONS)
            used[md_name] = True
        else:
            raise ValidationError(f"No documentation found: checked {html_name} and {md_name}")

        try:
            source.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ValidationError("Instruction document is not valid UTF-8") from e

        soup = BeautifulSoup(source, "lxml")

        for img in soup.find_all("img"):
            src = img.get("src")
            if not src:
                continue
            name = f"{prefix}{src}"
            if name not in files:
                raise ValidationError(f"Image tag found, but image file not found: {src}")
            mime = self._mime_type(src)
            logger.debug(f"Encoding image {src} as base64 data URI")
            used[name] = True
            encoded = base64.b64encode(files[name].encode("utf-8", "surrogateescape")).decode("ascii")
            img["src"] = f"data:{mime};base64,{encoded}"

        for name, was_used in sorted(used.items()):
            if not was_used:
                logger.warning(f"{name} was not used in the instructions")

        return str(soup)

    @staticmethod
    def _mime_type(src: str) -> str:
        lowered = src.lower()
        for suffix, mime in IMAGE_TYPES.items():
            if lowered.endswith(suffix):
                return mime
        raise ValidationError(f"Image tag found, but image type is unknown: {src}")
