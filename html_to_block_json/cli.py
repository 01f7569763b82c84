"""Command line entry point."""

import argparse
import asyncio
import json
import logging
import sys

from .exceptions import MissingMainError
from .page import HTMLToBlockJSON, convert_html
from .transformers import TRANSFORMERS


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description='Extract block JSON from HTML')
    parser.add_argument('html_file', help='Input HTML file')
    parser.add_argument('output_file', nargs='?', help='Output file (optional, defaults to stdout)')
    parser.add_argument('-c', '--config', help='JSON config file path')
    parser.add_argument('-s', '--schemas', help='Schema location (base URL or local directory)')
    parser.add_argument('--html', action='store_true', help='Output the role-annotated HTML instead of JSON')
    parser.add_argument('-t', '--transformer', choices=sorted(TRANSFORMERS), help='Transformer for schema-less output')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log schema loading and extraction details')
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')

    # Load config if provided
    config = {}
    if args.config:
        try:
            with open(args.config, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except Exception as e:
            print(f"Error reading config file: {e}", file=sys.stderr)
            sys.exit(1)
    if args.transformer:
        config['transformer'] = args.transformer

    try:
        with open(args.html_file, 'r', encoding='utf-8') as f:
            html_content = f.read()
    except Exception as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        sys.exit(1)

    if args.html:
        output = HTMLToBlockJSON(html_content, config=config).annotated_html()
    else:
        try:
            result = asyncio.run(convert_html(html_content, args.schemas, config=config))
        except MissingMainError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        output = json.dumps(result, indent=2, ensure_ascii=False)

    if args.output_file:
        try:
            with open(args.output_file, 'w', encoding='utf-8') as f:
                f.write(output)
            print(f"Output saved to: {args.output_file}", file=sys.stderr)
        except Exception as e:
            print(f"Error writing output file: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        print(output)


if __name__ == '__main__':
    main()
