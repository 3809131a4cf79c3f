"""Configuration et chargement du fichier config JSON / de l'environnement."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

# Poids du rapprochement opportunité (externe) ↔ enregistrement interne.
EXTERNAL_INTERNAL_WEIGHTS: dict[str, float] = {
    "customer_name": 0.40,
    "product_group": 0.20,
    "product_name": 0.20,
    "salesperson": 0.20,
}

# Poids de la comparaison interne ↔ interne (suggestions, doublons).
INTERNAL_INTERNAL_WEIGHTS: dict[str, float] = {
    "customer_name": 40.0,
    "product_group": 30.0,
    "product_name": 20.0,
    "salesperson": 10.0,
}

DEFAULT_AUTO_THRESHOLD = 80.0
DEFAULT_SUGGEST_THRESHOLD = 60.0
DEFAULT_MAX_SUGGESTIONS = 5

ENV_AUTO_THRESHOLD = "SIMILARITY_THRESHOLD_AUTO"
ENV_SUGGEST_THRESHOLD = "SIMILARITY_THRESHOLD_SUGGEST"
ENV_MAX_SUGGESTIONS = "MAX_SUGGESTIONS_PER_RECORD"

VALID_WEIGHT_FIELDS = frozenset(EXTERNAL_INTERNAL_WEIGHTS)


class DataMatchError(Exception):
    """Exception de base pour DataMatch."""


class ConfigError(DataMatchError, ValueError):
    """Erreur de validation de la configuration."""


class ConfigFileError(DataMatchError):
    """Erreur de chargement du fichier de configuration (fichier absent, JSON invalide)."""


class MatchInputError(DataMatchError, TypeError):
    """Argument invalide passé au moteur de matching (collection absente, mauvais type)."""


class MatchNotFoundError(DataMatchError, KeyError):
    """Correspondance introuvable dans le stockage."""


class StatusError(DataMatchError, ValueError):
    """Statut de correspondance invalide."""


def _validate_weights(weights: Mapping[str, Any], label: str) -> dict[str, float]:
    out: dict[str, float] = {}
    for name, value in weights.items():
        if name not in VALID_WEIGHT_FIELDS:
            raise ConfigError(f"{label}: champ inconnu {name!r}. Valides: {sorted(VALID_WEIGHT_FIELDS)}")
        w = float(value)
        if w <= 0:
            raise ConfigError(f"{label}: weight doit être > 0 pour {name!r} (got {w})")
        out[name] = w
    return out


def _check_threshold(name: str, value: float) -> float:
    if not 0 <= value <= 100:
        raise ConfigError(f"{name} doit être entre 0 et 100 (got {value})")
    return value


@dataclass
class SourceSpec:
    """Fichier tableur à charger et renommage éventuel des colonnes."""

    file: str = ""
    sheet: str | None = None  # None = première feuille
    columns: dict[str, str] = field(default_factory=dict)  # colonne fichier -> champ

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SourceSpec:
        columns = d.get("columns", {})
        if not isinstance(columns, dict):
            raise ConfigError("columns doit être un objet {colonne: champ}")
        return cls(file=d.get("file", ""), sheet=d.get("sheet"), columns=dict(columns))


@dataclass
class MatchingConfig:
    """Configuration principale de DataMatch."""

    auto_threshold: float = DEFAULT_AUTO_THRESHOLD
    suggest_threshold: float = DEFAULT_SUGGEST_THRESHOLD
    max_suggestions: int = DEFAULT_MAX_SUGGESTIONS
    external_weights: dict[str, float] = field(default_factory=lambda: dict(EXTERNAL_INTERNAL_WEIGHTS))
    internal_weights: dict[str, float] = field(default_factory=lambda: dict(INTERNAL_INTERNAL_WEIGHTS))

    external_source: SourceSpec = field(default_factory=SourceSpec)
    internal_source: SourceSpec = field(default_factory=SourceSpec)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> MatchingConfig:
        auto_threshold = _check_threshold("auto_threshold", float(d.get("auto_threshold", DEFAULT_AUTO_THRESHOLD)))
        suggest_threshold = _check_threshold(
            "suggest_threshold", float(d.get("suggest_threshold", DEFAULT_SUGGEST_THRESHOLD))
        )
        max_suggestions = int(d.get("max_suggestions", DEFAULT_MAX_SUGGESTIONS))
        if max_suggestions < 1:
            raise ConfigError(f"max_suggestions doit être >= 1 (got {max_suggestions})")

        external_weights = dict(EXTERNAL_INTERNAL_WEIGHTS)
        external_weights.update(_validate_weights(d.get("external_weights", {}), "external_weights"))
        internal_weights = dict(INTERNAL_INTERNAL_WEIGHTS)
        internal_weights.update(_validate_weights(d.get("internal_weights", {}), "internal_weights"))

        return cls(
            auto_threshold=auto_threshold,
            suggest_threshold=suggest_threshold,
            max_suggestions=max_suggestions,
            external_weights=external_weights,
            internal_weights=internal_weights,
            external_source=SourceSpec.from_dict(d.get("external_source", {})),
            internal_source=SourceSpec.from_dict(d.get("internal_source", {})),
        )

    @classmethod
    def load(cls, path: str | Path) -> MatchingConfig:
        """
        Charge la configuration depuis un fichier JSON.

        Raises:
            ConfigFileError: Si le fichier est absent ou le JSON invalide.
            ConfigError: Si la configuration est invalide.
        """
        path = Path(path).resolve()
        if not path.exists():
            raise ConfigFileError(f"Fichier de configuration introuvable: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                d = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigFileError(f"JSON invalide dans {path}: {e}") from e
        except OSError as e:
            raise ConfigFileError(f"Impossible de lire {path}: {e}") from e

        if not isinstance(d, dict):
            raise ConfigFileError(f"Fichier de configuration invalide: {path} doit contenir un objet JSON")

        config = cls.from_dict(d)
        config.resolve_paths(path.parent)
        return config

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> MatchingConfig:
        """
        Construit la configuration des seuils depuis les variables d'environnement.

        SIMILARITY_THRESHOLD_AUTO (80), SIMILARITY_THRESHOLD_SUGGEST (60),
        MAX_SUGGESTIONS_PER_RECORD (5).
        """
        env = os.environ if environ is None else environ
        d: dict[str, Any] = {}
        try:
            if env.get(ENV_AUTO_THRESHOLD):
                d["auto_threshold"] = float(env[ENV_AUTO_THRESHOLD])
            if env.get(ENV_SUGGEST_THRESHOLD):
                d["suggest_threshold"] = float(env[ENV_SUGGEST_THRESHOLD])
            if env.get(ENV_MAX_SUGGESTIONS):
                d["max_suggestions"] = int(env[ENV_MAX_SUGGESTIONS])
        except ValueError as e:
            raise ConfigError(f"Variable d'environnement invalide: {e}") from e
        return cls.from_dict(d)

    def resolve_paths(self, base_dir: Path) -> None:
        """
        Résout les chemins relatifs par rapport au répertoire de base (ex. dossier du fichier config).

        Modifie external_source.file et internal_source.file en place.
        """
        base = Path(base_dir)
        for source in (self.external_source, self.internal_source):
            if source.file and not Path(source.file).is_absolute():
                source.file = str((base / source.file).resolve())
