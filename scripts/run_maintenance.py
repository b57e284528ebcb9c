"""Maintenance entry point meant to be triggered by an external scheduler."""

from __future__ import annotations

import argparse
import logging

from app.application.use_cases.maintenance import (
    delete_all_for_user,
    run_maintenance,
)
from app.domain.exceptions import InvalidArgumentError, StorageUnavailableError
from app.infrastructure.database import SessionLocal, initialize_database


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the maintenance run."""

    parser = argparse.ArgumentParser(
        description="Purge expired notifications and prune orphaned delivery state.",
    )
    parser.add_argument(
        "--skip-purge",
        action="store_true",
        help="Keep expired notifications and only prune orphaned state rows.",
    )
    parser.add_argument(
        "--forget-user",
        default=None,
        metavar="USERNAME",
        help="Also delete every delivery state row of USERNAME (account removal).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level.",
    )
    return parser.parse_args()


def main() -> None:
    """Run the maintenance jobs using the provided command line arguments."""

    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    initialize_database()

    session = SessionLocal()
    try:
        if args.forget_user:
            removed = delete_all_for_user(session, args.forget_user)
            print(f"Estados eliminados para {args.forget_user}: {removed.deleted_count}")
        report = run_maintenance(session, purge=not args.skip_purge)
    except InvalidArgumentError as exc:
        raise SystemExit(f"Parámetros inválidos: {exc}") from exc
    except StorageUnavailableError as exc:
        raise SystemExit(f"Base de datos no disponible: {exc}") from exc
    else:
        print(
            "Mantenimiento completado:\n"
            f"  Notificaciones expiradas eliminadas: {report.expired_notifications}\n"
            f"  Estados huérfanos eliminados: {report.orphaned_states}"
        )
    finally:
        session.close()


if __name__ == "__main__":
    main()
