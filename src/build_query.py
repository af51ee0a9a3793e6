#!/usr/bin/env python3
"""
CLI tool for building a SPARQL query from item mappings over a data specification.

This script:
1. Loads the data specification (OWL vocabulary) into an item catalog
2. Merges the given item mappings as one user message into a new conversation
3. Prints the resulting mappings (including implicit ones) and the SPARQL query

Usage:
    python build_query.py --data-specification spec.ttl http://example.com/spec#Vehicle
    python build_query.py "http://example.com/spec#hasOwner=owned by" --message "Vehicles owned by people"
    python build_query.py --stats

The data specification path can also be set via DATA_SPECIFICATION_PATH in .env.
"""

import argparse
import logging
import os
import sys
from typing import List

from dotenv import load_dotenv

from catalog.store import RdfItemCatalog, DEFAULT_LANGUAGE
from conversation.service import ConversationService
from substructure.domain import ItemMapping, SubstructureIntegrityError

load_dotenv()

logger = logging.getLogger(__name__)


def parse_mapping(argument: str) -> ItemMapping:
    """Parse an "IRI" or "IRI=mapped words" argument."""
    iri, _, words = argument.partition("=")
    iri = iri.strip()
    if not iri:
        raise argparse.ArgumentTypeError(f"Missing item IRI in '{argument}'")
    return ItemMapping(item_iri=iri, mapped_words=words.strip())


def print_mappings(mappings: List[ItemMapping]):
    print(f"\nMappings ({len(mappings)}):")
    for mapping in mappings:
        if mapping.is_implicit:
            print(f"  - {mapping.item_iri} (implicit)")
        elif mapping.start_index is not None:
            print(f"  - {mapping.item_iri} <- \"{mapping.mapped_words}\" "
                  f"[{mapping.start_index}:{mapping.end_index}]")
        else:
            print(f"  - {mapping.item_iri} <- \"{mapping.mapped_words}\"")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Build a SPARQL query from item mappings over a data specification",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Query for a single class
  python build_query.py --data-specification spec.ttl http://example.com/spec#Vehicle

  # Object property with the words it was mapped from
  python build_query.py --data-specification spec.ttl \\
      "http://example.com/spec#hasOwner=owned by" --message "Vehicles owned by people"

  # Print catalog statistics only
  python build_query.py --data-specification spec.ttl --stats
        """
    )

    parser.add_argument(
        "mappings",
        nargs="*",
        type=parse_mapping,
        metavar="IRI[=WORDS]",
        help="Item mapping: item IRI, optionally followed by '=' and the mapped words"
    )

    parser.add_argument(
        "--data-specification",
        default=os.getenv("DATA_SPECIFICATION_PATH"),
        help="Path to the data specification RDF file (default: $DATA_SPECIFICATION_PATH)"
    )

    parser.add_argument(
        "--format",
        default=os.getenv("DATA_SPECIFICATION_FORMAT"),
        help="RDF serialization format; guessed from the file extension if omitted"
    )

    parser.add_argument(
        "--language",
        default=DEFAULT_LANGUAGE,
        help="Preferred label language"
    )

    parser.add_argument(
        "--message",
        default="",
        help="User message text used to locate the mapped words"
    )

    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print catalog statistics and exit"
    )

    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )

    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level), format='%(levelname)s: %(message)s')

    if not args.data_specification:
        parser.error("No data specification given, use --data-specification or set DATA_SPECIFICATION_PATH")
    if not args.stats and not args.mappings:
        parser.error("At least one item mapping is required")

    try:
        catalog = RdfItemCatalog.from_file(args.data_specification, format=args.format,
                                           language=args.language)
    except Exception as e:
        print(f"\n❌ Error loading data specification: {e}")
        return 1
    logger.info(f"Loaded data specification from {args.data_specification}")

    if args.stats:
        stats = catalog.get_stats()
        print("Data Specification Statistics:")
        print(f"  - Classes: {stats.total_classes}")
        print(f"  - Object properties: {stats.total_object_properties}")
        print(f"  - Datatype properties: {stats.total_datatype_properties}")
        return 0

    service = ConversationService(catalog)
    conversation = service.start_conversation("cli")
    mappings = service.process_user_message(conversation, "message-1", args.message, args.mappings)
    print_mappings(mappings)

    try:
        sparql = service.translate(conversation)
    except SubstructureIntegrityError as e:
        print(f"\n❌ Error translating substructure: {e}")
        return 1

    if sparql is None:
        print("\nNo items could be mapped, no query generated")
        return 1

    print("\nSPARQL query:")
    print(sparql)
    return 0


if __name__ == "__main__":
    sys.exit(main())
