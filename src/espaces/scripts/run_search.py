"""
Script para buscar y filtrar listings desde la terminal.

Uso:
    python -m espaces.scripts.run_search --search lyon
    python -m espaces.scripts.run_search --type bureau_prive --amenity wifi --price-range range1
    python -m espaces.scripts.run_search --listing 12
    python -m espaces.scripts.run_search --owner 7 --json
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from typing import Optional

import structlog

from espaces.api import ApiClient, PropertyRepository
from espaces.config import get_settings
from espaces.exceptions import ListingError, NotFoundError
from espaces.models import FilterState
from espaces.search import ListingService, get_listing_cache

# Configurar logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(message)s",
    force=True,
)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


def build_filter_state(args: argparse.Namespace) -> FilterState:
    """Arma el FilterState a partir de los argumentos de línea de comandos."""
    state = FilterState()
    state.set_search_term(args.search)
    for type_id in args.types or []:
        state.toggle_type(type_id)
    for amenity_id in args.amenities or []:
        state.toggle_amenity(amenity_id)
    if args.price_range:
        state.set_price_range(args.price_range)
    return state


def _print_listing(record, as_json: bool):
    if as_json:
        print(json.dumps(record.model_dump(), ensure_ascii=False))
        return
    amenities = ", ".join(record.amenity_labels()[:3])
    print(f"[{record.id}] {record.title} - {record.city} - {record.price:g}€")
    if amenities:
        print(f"      {amenities}")


async def run_search(args: argparse.Namespace) -> int:
    """Ejecuta la búsqueda pedida. Devuelve el exit code."""
    async with ApiClient(base_url=args.base_url) as client:
        cache = get_listing_cache()
        service = ListingService(
            repository=PropertyRepository(client=client, cache=cache),
            cache=cache,
            state=build_filter_state(args),
        )

        if args.listing:
            try:
                record = await service.get_listing(args.listing)
            except NotFoundError:
                logger.warning("Listing no encontrado", listing_id=args.listing)
                return 1
            _print_listing(record, args.json)
            return 0

        if args.owner:
            summary = await service.owner_summary(args.owner)
            if args.json:
                print(json.dumps(asdict(summary)))
            else:
                print(
                    f"Total: {summary.total} | Activos: {summary.active} | "
                    f"Pendientes: {summary.pending} | Ingresos: {summary.revenue:g}€"
                )
            return 0

        results = await service.fetch_filtered()
        state = service.get_filter_state()
        logger.info(
            "Búsqueda completada",
            results=len(results),
            active_filters=state.active_filter_count,
        )
        for record in results:
            _print_listing(record, args.json)
        return 0


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Buscar espacios de oficina")
    parser.add_argument("--search", default="", help="Texto a buscar")
    parser.add_argument(
        "--type", dest="types", action="append", help="Tipo de espacio (repetible)"
    )
    parser.add_argument(
        "--amenity", dest="amenities", action="append", help="Amenity requerida (repetible)"
    )
    parser.add_argument("--price-range", help="ID de rango de precio (range1..range5)")
    parser.add_argument("--listing", help="Mostrar un listing por ID")
    parser.add_argument("--owner", help="Resumen del dashboard de un propietario")
    parser.add_argument("--base-url", help="URL base del API (override de settings)")
    parser.add_argument("--json", action="store_true", help="Salida en JSON")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None):
    """Entry point del script."""
    args = parse_args(argv)

    try:
        exit_code = asyncio.run(run_search(args))
        sys.exit(exit_code)

    except KeyboardInterrupt:
        logger.info("Búsqueda interrumpida por usuario")
        sys.exit(130)
    except (ListingError, ValueError) as e:
        logger.error("Error en la búsqueda", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
