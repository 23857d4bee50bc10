"""Server-side redaction of submission content.

A viewer without full access gets a masked rendition of each code file and
metadata-only attachments. The mask keeps the rough shape of the source
(line count, indentation width, token widths) but is drawn from filler
characters absent from the original, and blank-line runs are collapsed, so
no run of more than two original characters survives.
"""
import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ..config import ATTACHMENT_URL_TTL_SECONDS
from ..models.attachment import Attachment
from ..models.code_file import CodeFile

# Filler characters for masked code, tried in order
MASK_CHARACTERS = "█▓▒░■□▪▫●○◆◇"
INDENT_CHARACTERS = "·∙⋅˙‧•◦"

_WHITESPACE_RUN = re.compile(r"[ \t]+")
_BLANK_LINE_RUN = re.compile(r"\n{3,}")


class ProjectedCodeFile(BaseModel):
    code_id: int
    filename: str
    language: str
    content: str
    is_redacted: bool
    created_at: datetime
    updated_at: datetime


class ProjectedAttachment(BaseModel):
    attachment_id: int
    filename: str
    mime_type: str
    file_size: Optional[int] = None
    download_url: Optional[str] = None
    is_redacted: bool


def _pick_filler(candidates: str, content: str) -> Optional[str]:
    for char in candidates:
        if char not in content:
            return char
    return None


def _mask_line(line: str, mask: str, indent: str) -> str:
    stripped = line.lstrip(" \t")
    if not stripped.strip():
        # whitespace-only lines carry no shape worth keeping
        return ""
    indentation = indent * len(line[:len(line) - len(stripped)].expandtabs(4))
    body = _WHITESPACE_RUN.sub(" ", stripped.rstrip(" \t\r"))
    return indentation + "".join(" " if c == " " else mask for c in body)


def mask_code(content: str) -> str:
    """Return a same-shaped, unrecoverable stand-in for ``content``."""
    if not content:
        return ""

    mask = _pick_filler(MASK_CHARACTERS, content)
    indent = _pick_filler(INDENT_CHARACTERS, content)
    if mask is None or indent is None:
        # The source already uses every filler character
        return ""

    masked = "\n".join(_mask_line(line, mask, indent) for line in content.splitlines())
    return _BLANK_LINE_RUN.sub("\n\n", masked)


def redact_code(code_file: CodeFile, has_full_access: bool) -> ProjectedCodeFile:
    return ProjectedCodeFile(
        code_id=code_file.code_id,
        filename=code_file.filename,
        language=code_file.language,
        content=code_file.content if has_full_access else mask_code(code_file.content),
        is_redacted=not has_full_access,
        created_at=code_file.created_at,
        updated_at=code_file.updated_at,
    )


def redact_attachment(attachment: Attachment, has_full_access: bool, storage) -> ProjectedAttachment:
    """Project an attachment for one viewer on one request.

    Without full access only the filename and declared type leave the server;
    the storage locator is dropped and no URL is signed. With full access a
    fresh, time-bounded URL is signed here, so it is never shared across
    viewers or requests.
    """
    if not has_full_access:
        return ProjectedAttachment(
            attachment_id=attachment.attachment_id,
            filename=attachment.filename,
            mime_type=attachment.mime_type,
            is_redacted=True,
        )

    download_url = storage.sign(attachment.storage_path, ATTACHMENT_URL_TTL_SECONDS)

    return ProjectedAttachment(
        attachment_id=attachment.attachment_id,
        filename=attachment.filename,
        mime_type=attachment.mime_type,
        file_size=attachment.file_size,
        download_url=download_url,
        is_redacted=False,
    )
