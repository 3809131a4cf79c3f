"""Interface en ligne de commande DataMatch."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from datamatch import __version__
from datamatch.config import DataMatchError, MatchingConfig
from datamatch.io_tables import (
    TableFileError,
    list_sheets,
    load_external_records,
    load_internal_records,
    save_xlsx,
)
from datamatch.matching.linker import Linker
from datamatch.merge import build_mapping_csv, merge_matches
from datamatch.report import build_report_df, print_report_console
from datamatch.store import MatchStore


def cmd_list_sheets(filepath: str) -> int:
    """Liste les feuilles d'un fichier xlsx."""
    sheets = list_sheets(filepath)
    print(f"Feuilles dans {filepath}:")
    for s in sheets:
        print(f"  - {s}")
    return 0


def cmd_run(
    config_path: str,
    output_path: str | None,
    *,
    dry_run: bool = False,
    mapping_path: str | None = None,
    store_path: str | None = None,
) -> int:
    """
    Exécute le rapprochement automatique entre les deux sources.

    Hors dry-run, écrit aussi le stockage des correspondances (CSV, par défaut
    matches.csv à côté du fichier de sortie) pour les commandes status/unmatch/history.
    """
    config = MatchingConfig.load(config_path)
    externals = load_external_records(config.external_source)
    internals = load_internal_records(config.internal_source)

    linker = Linker(config)
    results = linker.find_best_matches(externals, internals)

    # --mapping prime s'il est fourni
    map_path = (
        Path(mapping_path)
        if mapping_path
        else (Path(output_path).parent / "mapping.csv" if output_path else Path(config_path).parent / "mapping.csv")
    )
    build_mapping_csv(results, str(map_path))
    print(f"Mapping écrit: {map_path}")

    print_report_console(results, config, n_external=len(externals), n_internal=len(internals))

    if dry_run:
        print("Mode dry-run: pas d'écriture du fichier de sortie.")
        return 0

    if not output_path:
        print("Erreur: --output requis en mode non dry-run.")
        return 1

    store = MatchStore()
    store.save_all(results)
    store_file = Path(store_path) if store_path else Path(output_path).parent / "matches.csv"
    store.save_csv(store_file)
    print(f"Correspondances enregistrées: {store_file}")

    sheets = {
        "Merged": merge_matches(results),
        "Matches": store.to_dataframe(),
        "REPORT": build_report_df(results, config, n_external=len(externals), n_internal=len(internals)),
    }
    save_xlsx(output_path, sheets)
    print(f"Fichier de sortie: {output_path}")
    return 0


def cmd_suggest(config_path: str, row_key: str) -> int:
    """Affiche les suggestions pour un enregistrement interne."""
    config = MatchingConfig.load(config_path)
    internals = load_internal_records(config.internal_source)
    source = next((r for r in internals if r.row_key == row_key), None)
    if source is None:
        print(f"Erreur: enregistrement introuvable: {row_key}")
        return 1

    suggestions = Linker(config).suggest(source, internals)
    print(f"Suggestions pour {row_key} ({source.cust_short_dim_name}):")
    if not suggestions:
        print("  (aucune)")
    for i, s in enumerate(suggestions, start=1):
        reasons = f" - {', '.join(s.reasons)}" if s.reasons else ""
        print(f"  [{i}] {s.target.row_key} {s.target.cust_short_dim_name} score={s.score:.1f} ({s.confidence.value}){reasons}")
    return 0


def _load_store(store_path: str) -> MatchStore:
    if not Path(store_path).exists():
        raise TableFileError(f"Fichier introuvable: {store_path}")
    return MatchStore.load_csv(store_path)


def cmd_history(store_path: str, status: str | None = None) -> int:
    """Affiche les correspondances enregistrées et les statistiques."""
    store = _load_store(store_path)
    records = store.list(status)
    print(f"Correspondances ({len(records)}):")
    for r in records:
        print(
            f"  {r.match_id} {r.external_id} ↔ {r.internal_id} "
            f"score={r.similarity_score:.1f} ({r.confidence}) {r.match_type} {r.status}"
        )
    stats = store.statistics()
    print(
        f"Total: {stats['total_matches']} | Pending: {stats['pending_matches']} | "
        f"Approved: {stats['approved_matches']} | Rejected: {stats['rejected_matches']} | "
        f"Score moyen: {stats['average_similarity_score']:.1f}"
    )
    return 0


def cmd_status(
    store_path: str,
    match_id: str,
    status: str,
    *,
    approved_by: str = "",
    notes: str = "",
) -> int:
    """Change le statut d'une correspondance et réécrit le stockage."""
    store = _load_store(store_path)
    record = store.update_status(match_id, status, approved_by=approved_by, notes=notes)
    store.save_csv(store_path)
    print(f"{record.match_id}: {record.status}")
    return 0


def cmd_unmatch(store_path: str, match_id: str) -> int:
    """Supprime une correspondance du stockage."""
    store = _load_store(store_path)
    record = store.unmatch(match_id)
    store.save_csv(store_path)
    print(f"Correspondance supprimée: {record.match_id} ({record.external_id} ↔ {record.internal_id})")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        prog="datamatch",
        description="Rapprochement d'opportunités SharePoint et d'enregistrements clients (fuzzy matching)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Journalisation détaillée")

    subparsers = parser.add_subparsers(dest="command", help="Commandes")

    # list-sheets
    p_list = subparsers.add_parser("list-sheets", help="Lister les feuilles d'un xlsx")
    p_list.add_argument("file", help="Fichier xlsx")

    # run
    p_run = subparsers.add_parser("run", help="Exécuter le rapprochement automatique")
    p_run.add_argument("--config", "-c", required=True, help="Fichier config JSON")
    p_run.add_argument("--output", "-o", help="Fichier xlsx de sortie")
    p_run.add_argument("--dry-run", action="store_true", help="Ne pas écrire le fichier de sortie")
    p_run.add_argument("--mapping", "-m", help="Chemin pour mapping.csv")
    p_run.add_argument("--store", "-s", help="Chemin du stockage des correspondances (CSV)")

    # suggest
    p_sug = subparsers.add_parser("suggest", help="Suggestions pour un enregistrement interne")
    p_sug.add_argument("--config", "-c", required=True, help="Fichier config JSON")
    p_sug.add_argument("--row-key", "-k", required=True, help="Clé de l'enregistrement source")

    # history
    p_hist = subparsers.add_parser("history", help="Lister les correspondances enregistrées")
    p_hist.add_argument("--store", "-s", required=True, help="Stockage des correspondances (CSV)")
    p_hist.add_argument("--status", choices=["Pending", "Approved", "Rejected"], help="Filtrer par statut")

    # status
    p_status = subparsers.add_parser("status", help="Changer le statut d'une correspondance")
    p_status.add_argument("--store", "-s", required=True, help="Stockage des correspondances (CSV)")
    p_status.add_argument("match_id", help="Clé de la correspondance")
    p_status.add_argument("status", help="Pending, Approved ou Rejected")
    p_status.add_argument("--by", default="", help="Auteur de la décision")
    p_status.add_argument("--notes", default="", help="Commentaire")

    # unmatch
    p_unmatch = subparsers.add_parser("unmatch", help="Supprimer une correspondance")
    p_unmatch.add_argument("--store", "-s", required=True, help="Stockage des correspondances (CSV)")
    p_unmatch.add_argument("match_id", help="Clé de la correspondance")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "list-sheets":
            return cmd_list_sheets(args.file)

        if args.command == "run":
            if not args.dry_run and not args.output:
                parser.error("--output requis sauf en --dry-run")
            return cmd_run(
                args.config,
                args.output,
                dry_run=args.dry_run,
                mapping_path=args.mapping,
                store_path=args.store,
            )

        if args.command == "suggest":
            return cmd_suggest(args.config, args.row_key)

        if args.command == "history":
            return cmd_history(args.store, args.status)

        if args.command == "status":
            return cmd_status(args.store, args.match_id, args.status, approved_by=args.by, notes=args.notes)

        if args.command == "unmatch":
            return cmd_unmatch(args.store, args.match_id)
    except DataMatchError as e:
        print(f"Erreur: {e}")
        return 1

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
