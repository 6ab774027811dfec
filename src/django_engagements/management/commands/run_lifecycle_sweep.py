"""Management command to expire or cancel engagements nobody confirmed."""

import time

from django.core.management.base import BaseCommand

from django_engagements.conf import get_setting
from django_engagements.sweeper import run_lifecycle_sweep, stale_candidates


class Command(BaseCommand):
    help = 'Expire unconfirmed orders and cancel unconfirmed bookings past their windows'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show how many engagements would be swept without changing them'
        )
        parser.add_argument(
            '--loop',
            action='store_true',
            help='Keep running, sweeping every --interval seconds'
        )
        parser.add_argument(
            '--interval',
            type=int,
            default=None,
            help='Seconds between sweeps in --loop mode (default: ENGAGEMENTS_SWEEP_INTERVAL_SECONDS)'
        )
        parser.add_argument(
            '--max-runs',
            type=int,
            default=None,
            help='Stop --loop mode after this many sweeps'
        )

    def handle(self, *args, **options):
        if options['dry_run']:
            self._report_candidates()
            return

        if not options['loop']:
            self._sweep_once()
            return

        interval = options['interval'] or get_setting('SWEEP_INTERVAL_SECONDS')
        max_runs = options['max_runs']
        runs = 0
        while True:
            self._sweep_once()
            runs += 1
            if max_runs is not None and runs >= max_runs:
                break
            time.sleep(interval)

    def _report_candidates(self):
        candidates = stale_candidates()
        self.stdout.write(
            f'Would expire {candidates["order"].count()} orders '
            f'and cancel {candidates["booking"].count()} bookings'
        )

    def _sweep_once(self):
        result = run_lifecycle_sweep()
        self.stdout.write(
            self.style.SUCCESS(
                f'Expired {result.expired_orders} orders, '
                f'cancelled {result.cancelled_bookings} bookings'
            )
        )
        if result.failures:
            self.stderr.write(
                self.style.ERROR(f'{len(result.failures)} engagements failed: '
                                 f'{", ".join(result.failures)}')
            )
