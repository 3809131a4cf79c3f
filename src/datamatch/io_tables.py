"""Sources de données tableur : chargement des enregistrements et sauvegarde (Excel, CSV)."""

from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path

import pandas as pd

from datamatch.config import DataMatchError, SourceSpec
from datamatch.matching.schema import ExternalRecord, InternalRecord

SUPPORTED_INPUT_EXTENSIONS = (".xlsx", ".csv")
CSV_DELIMITERS = [",", ";", "\t", "|"]


class TableFileError(DataMatchError):
    """Erreur de chargement d'un fichier (fichier absent, feuille inexistante)."""


def _is_csv(path: Path) -> bool:
    return path.suffix.lower() == ".csv"


def _detect_csv_delimiter(path: Path, encoding: str) -> str | None:
    try:
        with path.open("r", encoding=encoding) as f:
            sample_lines: list[str] = []
            for line in f:
                if line.strip() == "":
                    continue
                sample_lines.append(line)
                if len(sample_lines) >= 5:
                    break
    except OSError:
        return None
    if not sample_lines:
        return None
    sample = "".join(sample_lines)
    try:
        return csv.Sniffer().sniff(sample, delimiters=CSV_DELIMITERS).delimiter
    except csv.Error:
        first = sample_lines[0]
        counts = {d: first.count(d) for d in CSV_DELIMITERS}
        best = max(counts, key=counts.__getitem__)
        return best if counts[best] > 0 else None


def list_sheets(filepath: str | Path) -> list[str]:
    """
    Liste les noms des feuilles d'un fichier tableur.

    Formats supportés : .xlsx, .csv (une seule "feuille" pour CSV).

    Raises:
        TableFileError: Si le fichier est absent ou illisible.
    """
    path = Path(filepath)
    if not path.exists():
        raise TableFileError(f"Fichier introuvable: {path}")
    if _is_csv(path):
        return ["(données)"]
    try:
        with pd.ExcelFile(path, engine="openpyxl") as xl:
            return [str(s) for s in xl.sheet_names]
    except Exception as e:
        raise TableFileError(f"Impossible de lire le fichier {path}: {e}") from e


def _read_csv(path: Path) -> pd.DataFrame:
    for encoding in ("utf-8", "latin-1"):
        try:
            delimiter = _detect_csv_delimiter(path, encoding) or ","
            return pd.read_csv(path, dtype=str, encoding=encoding, sep=delimiter, keep_default_na=False)
        except UnicodeDecodeError:
            continue
        except Exception as e:
            raise TableFileError(f"Erreur CSV {path}: {e}. Vérifiez le séparateur.") from e
    raise TableFileError(f"Erreur CSV {path}: encodage non reconnu")


def load_sheet(
    filepath: str | Path,
    sheet_name: str | None = None,
) -> pd.DataFrame:
    """
    Charge une feuille dans un DataFrame en préservant le texte.

    Args:
        filepath: Chemin vers le fichier.
        sheet_name: Nom de la feuille (None = première). Ignoré pour CSV.

    Raises:
        TableFileError: Si le fichier est absent, illisible ou si la feuille n'existe pas.
    """
    path = Path(filepath)
    if not path.exists():
        raise TableFileError(f"Fichier introuvable: {path}")

    if _is_csv(path):
        return _read_csv(path)

    try:
        xl = pd.ExcelFile(path, engine="openpyxl")
    except Exception as e:
        raise TableFileError(f"Impossible de lire le fichier {path}: {e}") from e

    with xl:
        if sheet_name is None:
            sheet_name = str(xl.sheet_names[0])
        elif sheet_name not in xl.sheet_names:
            sheets = [str(s) for s in xl.sheet_names]
            raise TableFileError(f"Feuille '{sheet_name}' introuvable dans {path}. Feuilles: {', '.join(sheets)}")
        try:
            df = pd.read_excel(xl, sheet_name=sheet_name, dtype=str)
        except Exception as e:
            raise TableFileError(f"Erreur feuille '{sheet_name}' dans {path}: {e}") from e
    return df.fillna("")


def _rows(df: pd.DataFrame, columns: dict[str, str]) -> list[dict[str, object]]:
    if columns:
        df = df.rename(columns=columns)
    return df.to_dict(orient="records")


def records_from_dataframe(df: pd.DataFrame, kind: type, columns: dict[str, str] | None = None) -> list:
    """Convertit chaque ligne en ExternalRecord ou InternalRecord via from_dict."""
    return [kind.from_dict(row) for row in _rows(df, columns or {})]


def load_external_records(source: SourceSpec) -> list[ExternalRecord]:
    """Charge les opportunités (liste externe) décrites par la configuration."""
    df = load_sheet(source.file, source.sheet)
    return records_from_dataframe(df, ExternalRecord, source.columns)


def load_internal_records(source: SourceSpec) -> list[InternalRecord]:
    """Charge les enregistrements de la table transactionnelle."""
    df = load_sheet(source.file, source.sheet)
    return records_from_dataframe(df, InternalRecord, source.columns)


def _naive(val: object) -> object:
    if isinstance(val, datetime) and val.tzinfo is not None:
        return val.replace(tzinfo=None)
    return val


def save_xlsx(
    filepath: str | Path,
    dataframes: dict[str, pd.DataFrame],
    *,
    index: bool = False,
) -> None:
    """
    Sauvegarde plusieurs DataFrames dans un fichier xlsx (une feuille par DataFrame).

    Les dates avec fuseau sont converties en naïves (limite openpyxl).
    """
    with pd.ExcelWriter(filepath, engine="openpyxl") as writer:
        for sheet_name, df in dataframes.items():
            out = df.copy()
            for col in out.columns:
                if isinstance(out[col].dtype, pd.DatetimeTZDtype):
                    out[col] = out[col].dt.tz_localize(None)
                elif out[col].dtype == object:
                    out[col] = out[col].map(_naive)
            # Excel limite les noms de feuille à 31 caractères
            out.to_excel(writer, sheet_name=str(sheet_name)[:31], index=index)
