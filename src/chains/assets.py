"""Placeholder tokens that keep base64 audio out of model prompts.

Generation: each supplied audio slot is announced to the model as a fixed
sentinel token, and the real ``data:`` URI is put back after extraction.

Chat edits: every ``data:...;base64,...`` payload already embedded in the
artifact is swapped for an indexed token before the code goes to the model,
and swapped back in the model's answer.
"""

import base64
import re

from pydantic import BaseModel, Field

BG_MUSIC_TOKEN = "__CUSTOM_BG_MUSIC_TOKEN__"
CORRECT_TOKEN = "__CUSTOM_CORRECT_TOKEN__"
WRONG_TOKEN = "__CUSTOM_WRONG_TOKEN__"

# Hosted fallback sounds used when the user uploads nothing for a slot
DEFAULT_AUDIO = {
    "background": "https://drive.google.com/uc?export=download&id=1j0NFTSkaWtntRRbrExcAkx3_we07ZusE",
    "correct": "https://drive.google.com/uc?export=download&id=1wxYH5-gSbJwFxBHy-oXfT2w64cJLa5Vl",
    "incorrect": "https://drive.google.com/uc?export=download&id=18dwx0EDlzbYDds0PupqxmR03ux_QH4zn",
}

SLOT_TOKENS = {
    "background": BG_MUSIC_TOKEN,
    "correct": CORRECT_TOKEN,
    "incorrect": WRONG_TOKEN,
}

EMBEDDED_TOKEN_TEMPLATE = "__EMBEDDED_ASSET_{index}__"

DATA_URI_PATTERN = re.compile(r"data:[\w.+-]+/[\w.+-]+(?:;[\w.+-]+=[\w.+-]+)*;base64,[A-Za-z0-9+/]+=*")


class AudioAssets(BaseModel):
    """User supplied sounds as data URIs."""

    background: str | None = Field(default=None, description="Nhạc nền")
    correct: str | None = Field(default=None, description="Âm thanh trả lời đúng")
    incorrect: str | None = Field(default=None, description="Âm thanh trả lời sai")

    def slots(self) -> dict[str, str | None]:
        return {
            "background": self.background,
            "correct": self.correct,
            "incorrect": self.incorrect,
        }


def encode_audio(data: bytes, mime_type: str = "audio/mpeg") -> str:
    """Encode an uploaded audio blob as a data URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type or 'audio/mpeg'};base64,{encoded}"


def audio_sources(assets: AudioAssets) -> dict[str, str]:
    """Sources the model is told to use, one per slot.

    Supplied slots get their sentinel token, the others the hosted default.
    """
    return {
        slot: SLOT_TOKENS[slot] if payload else DEFAULT_AUDIO[slot]
        for slot, payload in assets.slots().items()
    }


def restore_audio_tokens(code: str, assets: AudioAssets) -> str:
    """Replace every sentinel with its payload, or an empty string if absent."""
    for slot, payload in assets.slots().items():
        code = code.replace(SLOT_TOKENS[slot], payload or "")
    return code


def mask_embedded_payloads(code: str) -> tuple[str, dict[str, str]]:
    """Swap every embedded base64 payload for an indexed token.

    Identical payloads share one token.

    Returns:
        The masked code and the token -> payload mapping.
    """
    mapping: dict[str, str] = {}
    tokens_by_payload: dict[str, str] = {}

    def _replace(match: re.Match) -> str:
        payload = match.group(0)
        token = tokens_by_payload.get(payload)
        if token is None:
            token = EMBEDDED_TOKEN_TEMPLATE.format(index=len(mapping))
            tokens_by_payload[payload] = token
            mapping[token] = payload
        return token

    masked = DATA_URI_PATTERN.sub(_replace, code)
    return masked, mapping


def unmask_payloads(text: str, mapping: dict[str, str]) -> str:
    """Put the original payloads back in place of their tokens."""
    for token, payload in mapping.items():
        text = text.replace(token, payload)
    return text
