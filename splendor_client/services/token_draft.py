"""
Service: token_draft.py
Rôle:
- Accumuler un brouillon local d'échange de jetons (delta signé par couleur) avant envoi.
- Classer le brouillon en une requête au moment de la soumission.

Bornes (réévaluées à CHAQUE ajustement, avec la banque et les jetons possédés du moment):
    max(-2, -owned[color]) <= draft[color] <= min(2, bank[color])

Classification (sur les six couleurs):
1. uniquement des négatifs → discard_tokens (couleurs répétées selon la quantité)
2. uniquement des positifs → take_tokens (idem) ; rejet local si l'or y figure
3. mélange +/-            → adjust_tokens (map signée, sans expansion)
4. tout à zéro            → rejet local "No token change selected"

Le brouillon n'est jamais mélangé à la Room: il vit ici jusqu'au succès de l'envoi.
"""
from __future__ import annotations

from typing import Dict, List

from splendor_client.models.messages import ActionPayload, GameAction
from splendor_client.models.tokens import GOLD, TOKEN_ACTION_COLORS, TokenSet

MAX_PER_COLOR = 2

Draft = Dict[str, int]


class DraftRejected(ValueError):
    """Rejet local d'un brouillon (aucun appel réseau)."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def empty_draft() -> Draft:
    return {color: 0 for color in TOKEN_ACTION_COLORS}


def draft_bounds(color: str, bank: TokenSet, owned: TokenSet) -> tuple[int, int]:
    return max(-MAX_PER_COLOR, -owned.get(color)), min(MAX_PER_COLOR, bank.get(color))


def _expand(draft: Draft, sign: int) -> List[str]:
    colors: List[str] = []
    for color in TOKEN_ACTION_COLORS:
        amount = draft.get(color, 0) * sign
        if amount > 0:
            colors.extend([color] * amount)
    return colors


def classify(draft: Draft) -> GameAction:
    """Traduit un brouillon en GameAction; lève DraftRejected si rien à envoyer ou or direct."""
    positives = _expand(draft, 1)
    negatives = _expand(draft, -1)

    if not positives and not negatives:
        raise DraftRejected("No token change selected")
    if positives and negatives:
        adjust = {c: draft[c] for c in TOKEN_ACTION_COLORS if draft.get(c, 0) != 0}
        return GameAction(type="adjust_tokens", payload=ActionPayload(adjust=adjust))
    if positives:
        if GOLD in positives:
            raise DraftRejected("Cannot take gold directly")
        return GameAction(type="take_tokens", payload=ActionPayload(colors=positives))
    return GameAction(type="discard_tokens", payload=ActionPayload(colors=negatives))


class TokenDraftEngine:
    def __init__(self) -> None:
        self.draft: Draft = empty_draft()

    def adjust(self, color: str, delta: int, bank: TokenSet, owned: TokenSet) -> Draft:
        if color not in self.draft:
            raise KeyError(color)
        low, high = draft_bounds(color, bank, owned)
        self.draft[color] = max(low, min(high, self.draft[color] + delta))
        return dict(self.draft)

    def submit(self) -> GameAction:
        """Construit la requête; le brouillon reste intact jusqu'à `commit()`."""
        return classify(self.draft)

    def commit(self) -> Draft:
        """À appeler après une réponse serveur positive."""
        return self.reset()

    def reset(self) -> Draft:
        self.draft = empty_draft()
        return dict(self.draft)

    def is_empty(self) -> bool:
        return not any(self.draft.values())
