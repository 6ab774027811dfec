"""Django management command for engagementsctl."""

import argparse
import sys

from django.core.management.base import BaseCommand

from django_engagements.cli import cli


class Command(BaseCommand):
    help = "Terminal UI for inspecting engagements and running the lifecycle sweep"

    def add_arguments(self, parser):
        parser.add_argument("cli_args", nargs=argparse.REMAINDER, metavar="args")

    def handle(self, *args, **options):
        cli_args = list(options.get("cli_args", []))
        if not cli_args:
            cli_args = ["--help"]
        try:
            cli(args=cli_args, prog_name="engagementsctl", standalone_mode=True)
        except SystemExit as e:
            if e.code != 0:
                sys.exit(e.code)
