"""Submit one prompt to the generation endpoint from the command line."""
from __future__ import annotations
import argparse
import logging
import sys

from shadowbinder.client.form import GenerationForm
from shadowbinder.common.config import DEFAULT_CLIENT_CFG, load_client_settings
from shadowbinder.common.logging_setup import setup_logging
from shadowbinder.common.schema import GenerationType

LOGGER = logging.getLogger("shadowbinder.client.conjure")

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Conjure text (or, someday, images) from a prompt")
    ap.add_argument("--prompt", required=True, help="Prompt text")
    ap.add_argument("--type", default=GenerationType.TEXT.value, help="Generation type: text or image")
    ap.add_argument("--cfg", default=DEFAULT_CLIENT_CFG, help="Client config path")
    ap.add_argument("--url", default=None, help="Override the endpoint URL from the config")
    ap.add_argument("--html", action="store_true", help="Print the rendered HTML fragment")
    return ap

def main(argv: list[str] | None = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)

    settings = load_client_settings(args.cfg)
    form = GenerationForm(endpoint_url=args.url or settings.endpoint_url, timeout=settings.timeout_s)
    form.set_prompt(args.prompt)
    form.set_type(args.type)
    LOGGER.info("Echo: \"%s\"", form.echo)

    form.submit()
    out = form.render_html() if args.html else form.render_text()
    if form.error is not None:
        print(out, file=sys.stderr)
        return 1
    print(out)
    return 0

if __name__ == "__main__":
    sys.exit(main())
