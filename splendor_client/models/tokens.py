"""
Models / tokens.py
Rôle:
- Définir le jeu de jetons (5 couleurs de base + or joker) et la base commune des modèles "fil".

Notes:
- Côté serveur les clés JSON sont en camelCase; côté Python on garde du snake_case
  grâce à `alias_generator=to_camel` (`populate_by_name` accepte les deux formes).
- `extra="allow"` : un champ inconnu envoyé par le serveur est conservé tel quel.
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Couleurs de base (affichage, bonus de cartes)
TOKEN_COLORS = ("white", "blue", "green", "red", "black")
# Ordre de soumission d'un brouillon de jetons (inclut l'or)
TOKEN_ACTION_COLORS = ("black", "blue", "white", "green", "red", "gold")
GOLD = "gold"

# Libellés courts utilisés dans le journal (W B G R K Gd)
TOKEN_LABELS = {"white": "W", "blue": "B", "green": "G", "red": "R", "black": "K", "gold": "Gd"}


class WireModel(BaseModel):
    """Base des modèles échangés avec le serveur (camelCase sur le fil)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TokenSet(WireModel):
    """Six compteurs de jetons, toujours >= 0."""
    white: int = Field(default=0, ge=0)
    blue: int = Field(default=0, ge=0)
    green: int = Field(default=0, ge=0)
    red: int = Field(default=0, ge=0)
    black: int = Field(default=0, ge=0)
    gold: int = Field(default=0, ge=0)

    def get(self, color: str) -> int:
        if color not in TOKEN_LABELS:
            raise KeyError(color)
        return getattr(self, color)

    def total(self) -> int:
        return sum(self.get(c) for c in TOKEN_LABELS)

    def as_text(self) -> str:
        """Rendu compact: `W1 B0 G2 R0 K0 Gd1`."""
        return " ".join(f"{TOKEN_LABELS[c]}{self.get(c)}" for c in TOKEN_LABELS)
