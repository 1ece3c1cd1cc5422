"""Gera os arquivos por UF a partir do feed de repetidoras."""
import argparse
import logging
import sys
from pathlib import Path

from rptr_config import settings

from .core.city_index import CityNameIndex
from .core.city_matcher import MatchThresholds
from .core.output_writer import FileSystemSink
from .core.resource_loader import HttpFetcher, ResourceLoader
from .orchestrator import Orchestrator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Normaliza repetidoras brasileiras e gera JSON/CSV por UF")
    parser.add_argument('--source', '-s', action='append', dest='sources',
                        help='Fonte do dataset (caminho ou URL). Pode repetir; ordem = prioridade')
    parser.add_argument('--output-dir', '-o', default=None, help='Diretório de saída')
    parser.add_argument('--cities-cache', default=None, help='Arquivo de cache da lista de cidades')
    parser.add_argument('--log-level', default=None, help='Nível de log (DEBUG, INFO, ...)')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=(args.log_level or settings.LOG_LEVEL).upper(),
        format='%(asctime)s [%(levelname)s] %(message)s'
    )

    city_index = CityNameIndex.from_settings(settings)
    if args.cities_cache:
        city_index.cache_path = Path(args.cities_cache)

    sink = FileSystemSink(
        args.output_dir or settings.OUTPUT_DIR,
        delimiter=settings.CSV_DELIMITER,
        alias_template=settings.CHANNEL_ALIAS_TEMPLATE,
    )

    orchestrator = Orchestrator(
        loader=ResourceLoader(remote=HttpFetcher(timeout=settings.HTTP_TIMEOUT)),
        city_index=city_index,
        resolver=sink.resolve,
        saver=sink,
        thresholds=MatchThresholds.from_settings(settings),
        sources=args.sources or settings.REPEATERS_SOURCES,
        cache_key=settings.REPEATERS_CACHE_KEY,
    )

    try:
        summary = orchestrator.run()
        combined = sink.save_combined(summary.contents)
    except Exception as e:
        logging.error("Falha no processamento: %s", e)
        return 1

    print(f"Processado: {summary.total_states} estados, {summary.records_out} registros "
          f"(original: {summary.records_in})")
    print(f"Arquivo combinado: {combined}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
