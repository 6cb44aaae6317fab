# lavanderia/core/folio.py

import re
import secrets
from typing import Callable, Sequence

from fastapi import Depends
from loguru import logger

from lavanderia.core.config import Settings, get_settings

# Sem I, O, 1 e 0 para não confundir na leitura
FOLIO_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
FOLIO_LENGTH = 4


class FolioGenerator:
    """Gera folios curtos legíveis (ex: LAV-7KQ3). Não verifica unicidade."""

    def __init__(self, prefix: str = "LAV", choice: Callable[[Sequence[str]], str] = secrets.choice):
        if not prefix or not prefix.isalnum():
            raise ValueError("Prefix must be a non-empty alphanumeric string.")
        self.prefix = prefix.upper()
        self._choice = choice

    @property
    def pattern(self) -> re.Pattern:
        return re.compile(rf"^{re.escape(self.prefix)}-[{FOLIO_ALPHABET}]{{{FOLIO_LENGTH}}}$")

    def generate(self) -> str:
        code = "".join(self._choice(FOLIO_ALPHABET) for _ in range(FOLIO_LENGTH))
        folio = f"{self.prefix}-{code}"
        logger.debug(f"Generated folio {folio}")
        return folio


async def get_folio_generator(settings: Settings = Depends(get_settings)) -> FolioGenerator:
    return FolioGenerator(settings.FOLIO_PREFIX)
