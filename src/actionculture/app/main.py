"""Point d'entrée en ligne de commande d'Action Culture (consultation des sites patrimoniaux)."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Sequence, TextIO

import httpx

from actionculture import __version__
from actionculture.app.feedback import format_error, format_precondition, next_step_for
from actionculture.core.api.client import ApiClient, ApiError
from actionculture.core.api.patrimoine import PatrimoineService, format_address, heritage_type
from actionculture.core.api.params import SiteFilters
from actionculture.core.config import load_api_config, with_token
from actionculture.core.models import Site
from actionculture.core.resources.sites import SiteResource
from actionculture.core.utils.logging import LOGGER_NAME, setup_logging

TOKEN_ENV = "ACTIONCULTURE_TOKEN"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="actionculture",
        description="Consultation du patrimoine culturel (API Action Culture).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, default=None, help="Fichier TOML (table [api]).")
    parser.add_argument("--token", default=None, help=f"Jeton JWT (sinon ${TOKEN_ENV}).")
    parser.add_argument("--verbose", "-v", action="store_true", help="Logs détaillés.")
    commands = parser.add_subparsers(dest="command", required=True)

    sites = commands.add_parser("sites", help="Sites patrimoniaux.")
    actions = sites.add_subparsers(dest="action", required=True)

    list_p = actions.add_parser("list", help="Lister une page de sites.")
    list_p.add_argument("--page", type=int, default=1)
    list_p.add_argument("--limit", type=int, default=None)
    list_p.add_argument("--wilaya", type=int, default=None, dest="id_wilaya")
    list_p.add_argument("--type", default=None, dest="type_patrimoine",
                        choices=["monument", "vestige", "site_culturel"])

    search_p = actions.add_parser("search", help="Recherche plein texte.")
    search_p.add_argument("query")

    popular_p = actions.add_parser("popular", help="Sites les plus consultés.")
    popular_p.add_argument("--limit", type=int, default=10)

    nearby_p = actions.add_parser("nearby", help="Sites autour d'un point.")
    nearby_p.add_argument("latitude", type=float)
    nearby_p.add_argument("longitude", type=float)
    nearby_p.add_argument("--rayon", type=float, default=10.0)

    show_p = actions.add_parser("show", help="Détail d'un site.")
    show_p.add_argument("site_id", type=int)
    return parser


def format_site_line(site: Site) -> str:
    return f"{site.id}  {site.nom}  ({site.wilaya or '-'})"


def _print_sites(sites: list[Site], out: TextIO) -> None:
    if not sites:
        print("Aucun site trouvé.", file=out)
        return
    for site in sites:
        print(format_site_line(site), file=out)


async def _run_sites(args: argparse.Namespace, resource: SiteResource, out: TextIO) -> bool:
    if args.action == "list":
        filters = SiteFilters(id_wilaya=args.id_wilaya, type_patrimoine=args.type_patrimoine)
        ok = await resource.fetch_page(filters, page=args.page, limit=args.limit)
        if ok:
            _print_sites(resource.items, out)
            p = resource.pagination
            print(f"Page {p.page}/{max(p.total_pages, 1)} ({p.total} site(s))", file=out)
        return ok
    if args.action == "search":
        ok = await resource.search(args.query)
    elif args.action == "popular":
        ok = await resource.popular(args.limit)
    elif args.action == "nearby":
        ok = await resource.nearby(
            {"latitude": args.latitude, "longitude": args.longitude, "rayon": args.rayon}
        )
    else:
        site = await resource.get_one(args.site_id)
        if site is None:
            return False
        print(site.nom, file=out)
        print(f"  Type    : {heritage_type(site).value}", file=out)
        print(f"  Adresse : {format_address(site)}", file=out)
        if site.latitude is not None and site.longitude is not None:
            print(f"  GPS     : {site.latitude}, {site.longitude}", file=out)
        if site.description:
            print(f"  {site.description}", file=out)
        return True
    if ok:
        _print_sites(resource.items, out)
    return ok


def main(
    argv: Sequence[str] | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    out = out or sys.stdout
    err = err or sys.stderr
    args = build_parser().parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.WARNING)
    log = logging.getLogger(LOGGER_NAME)

    try:
        config = load_api_config(args.config)
        config = with_token(config, args.token or os.environ.get(TOKEN_ENV) or config.token)
    except (OSError, ValueError) as exc:
        print(format_error(exc, context="Configuration invalide"), file=err)
        return 2

    client = ApiClient(config, transport=transport)
    resource = SiteResource(PatrimoineService(client))
    log.debug("Commande sites %s sur %s", args.action, config.base_url)

    try:
        ok = asyncio.run(_run_sites(args, resource, out))
    except ValueError as exc:
        print(format_precondition(format_error(exc), "Corrigez les arguments de la commande."), file=err)
        return 2
    finally:
        resource.close()

    if not ok:
        message = format_error(resource.error, context="Erreur")
        failure = resource.failure
        step = next_step_for(failure) if isinstance(failure, ApiError) else None
        print(format_precondition(message, step), file=err)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
