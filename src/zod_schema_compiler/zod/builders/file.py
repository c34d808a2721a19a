"""
File builder.

Size rules on files are kilobytes on the server and bytes in ``z.file()``,
so bounds are multiplied by 1024. Extension rules (``mimes``,
``extensions``) are mapped to MIME types because the browser only exposes
the type of an uploaded file.
"""

from __future__ import annotations

import logging
from typing import Any

from .base import ZodBuilder, escape_js, js_number, message_param

logger = logging.getLogger(__name__)

IMAGE_MIME_TYPES: tuple[str, ...] = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/bmp",
    "image/webp",
)

EXTENSION_MIME_TYPES: dict[str, str] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "svg": "image/svg+xml",
    "webp": "image/webp",
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "csv": "text/csv",
    "txt": "text/plain",
    "zip": "application/zip",
    "mp3": "audio/mpeg",
    "mp4": "video/mp4",
    "avi": "video/x-msvideo",
    "mov": "video/quicktime",
}

DIMENSION_CHECKS: dict[str, str] = {
    "width": "img.width === {}",
    "height": "img.height === {}",
    "min_width": "img.width >= {}",
    "max_width": "img.width <= {}",
    "min_height": "img.height >= {}",
    "max_height": "img.height <= {}",
}


def _mime_list(mime_types: list[str]) -> str:
    return "[" + ", ".join(f"'{escape_js(m)}'" for m in mime_types) + "]"


def _ratio(value: str) -> float | int | str:
    numerator, sep, denominator = value.partition("/")
    if sep:
        try:
            return float(numerator) / float(denominator)
        except (ValueError, ZeroDivisionError):
            return value
    return js_number(value)


class ZodFileBuilder(ZodBuilder):
    """``z.file()`` with MIME, size and image-dimension checks."""

    def base_type(self) -> str:
        return "z.file()"

    def validate_file(self, parameters: list[Any], message: str | None = None):
        return self

    def validate_image(self, parameters: list[Any], message: str | None = None):
        if self.has_rule("mime"):
            return self
        mime_types = list(IMAGE_MIME_TYPES)
        if "allow_svg" in [str(p) for p in parameters]:
            mime_types.append("image/svg+xml")
        return self.add_rule(f".mime({_mime_list(mime_types)}{message_param(message)})")

    def validate_mimes(self, parameters: list[Any], message: str | None = None):
        mime_types: list[str] = []
        for extension in parameters:
            mime = EXTENSION_MIME_TYPES.get(str(extension).lower().lstrip("."))
            if mime is None:
                logger.debug(f"{self.field_name}: no MIME type known for '.{extension}'")
                continue
            if mime not in mime_types:
                mime_types.append(mime)
        return self.validate_mimetypes(mime_types, message)

    def validate_extensions(self, parameters: list[Any], message: str | None = None):
        return self.validate_mimes(parameters, message)

    def validate_mimetypes(self, parameters: list[Any], message: str | None = None):
        if not parameters:
            return self
        mime_types = [str(p) for p in parameters]
        return self.replace_rule("mime", f".mime({_mime_list(mime_types)}{message_param(message)})")

    def _bytes(self, kilobytes: Any) -> int | float | None:
        size = js_number(kilobytes)
        if isinstance(size, str):
            return None
        return size * 1024

    def validate_min(self, parameters: list[Any], message: str | None = None):
        size = self._bytes(parameters[0])
        if size is None:
            return self
        return self.replace_rule("min", f".min({size}{message_param(message)})")

    def validate_max(self, parameters: list[Any], message: str | None = None):
        size = self._bytes(parameters[0])
        if size is None:
            return self
        return self.replace_rule("max", f".max({size}{message_param(message)})")

    def validate_size(self, parameters: list[Any], message: str | None = None):
        self.validate_min(parameters[:1], message)
        return self.validate_max(parameters[:1], message)

    def validate_between(self, parameters: list[Any], message: str | None = None):
        self.validate_min(parameters[:1], message)
        return self.validate_max(parameters[1:2], message)

    def validate_dimensions(self, parameters: list[Any], message: str | None = None):
        """
        Image dimension constraints (``dimensions:min_width=100,ratio=3/2``).

        The check needs the decoded image, so it compiles to an async
        refine; schemas using it must be parsed with ``parseAsync``.
        """
        checks: list[str] = []
        for parameter in parameters:
            key, sep, value = str(parameter).partition("=")
            key, value = key.strip(), value.strip()
            if not sep:
                continue
            if key == "ratio":
                checks.append(f"Math.abs((img.width / img.height) - {_ratio(value)}) < 0.01")
            elif key in DIMENSION_CHECKS:
                checks.append(DIMENSION_CHECKS[key].format(js_number(value)))
            else:
                logger.debug(f"{self.field_name}: unknown dimensions constraint '{key}'")

        if not checks:
            return self

        escaped = escape_js(message or "The image has invalid dimensions.")
        condition = " && ".join(checks)
        return self.add_rule(
            ".refine((file) => {\n"
            "    if (!file) return true;\n"
            "    return new Promise((resolve) => {\n"
            "        const reader = new FileReader();\n"
            "        reader.onload = (e) => {\n"
            "            const img = new Image();\n"
            "            img.onload = () => {\n"
            f"                resolve({condition});\n"
            "            };\n"
            "            img.onerror = () => resolve(false);\n"
            "            img.src = e.target?.result as string;\n"
            "        };\n"
            "        reader.onerror = () => resolve(false);\n"
            "        reader.readAsDataURL(file);\n"
            "    });\n"
            f"}}, {{ error: '{escaped}'}})"
        )


__all__ = ["ZodFileBuilder", "EXTENSION_MIME_TYPES", "IMAGE_MIME_TYPES"]
