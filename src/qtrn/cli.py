import logging

import click

from . import __version__, chart, fetcher
from .errors import EmptyResultError, QtrnError
from .models import DEFAULT_END, DEFAULT_START, ChartRequest, Interval

logger = logging.getLogger(__name__)

TOO_MANY_SYMBOLS = "\nToo many symbols, only 1 symbol is allowed for charting.\n"

context_settings = dict(help_option_names=["-h", "--help"])


class AliasedGroup(click.Group):
    """click group that also resolves commands by their short aliases."""

    aliases = {"c": "chart"}

    def get_command(self, ctx, cmd_name):
        return super().get_command(ctx, self.aliases.get(cmd_name, cmd_name))

    def resolve_command(self, ctx, args):
        # report the canonical name, not the alias
        _, cmd, args = super().resolve_command(ctx, args)
        return (cmd.name if cmd else None), cmd, args


def configure_logging(debug: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group(cls=AliasedGroup, context_settings=context_settings)
@click.version_option(__version__, prog_name="qtrn")
@click.option("-d", "--debug", default=False, is_flag=True, envvar="QTRN_DEBUG", help="Enable debug logging")
def cli(debug: bool):
    """Financial market data in the terminal."""
    configure_logging(debug)


@cli.command(
    "chart",
    short_help="Print stock chart to the current shell",
    help="Print stock chart to the current shell using a symbol, time frame, and interval.\n\n"
         "Alias: c\n\nExample: qtrn chart AAPL -s 2016-12-01 -e 2017-06-20 -i 1d",
    context_settings=context_settings,
)
@click.argument("symbols", nargs=-1, required=True, metavar="SYMBOL")
@click.option(
    "-s", "--start",
    type=click.DateTime(formats=[fetcher.DATE_FORMAT]),
    default=DEFAULT_START.isoformat(),
    envvar="QTRN_CHART_START",
    show_default=True,
    help="Start of the chart's time frame (YYYY-MM-DD)",
)
@click.option(
    "-e", "--end",
    type=click.DateTime(formats=[fetcher.DATE_FORMAT]),
    default=DEFAULT_END.isoformat(),
    envvar="QTRN_CHART_END",
    show_default=True,
    help="End of the chart's time frame (YYYY-MM-DD)",
)
@click.option(
    "-i", "--interval",
    type=click.Choice([i.value for i in Interval]),
    default=Interval.DAY.value,
    envvar="QTRN_CHART_INTERVAL",
    show_default=True,
    help="Time interval of each chart point",
)
def chart_command(symbols, start, end, interval):
    if len(symbols) > 1:
        click.echo(TOO_MANY_SYMBOLS)
        return

    try:
        request = ChartRequest(
            symbol=symbols[0],
            start=start.date(),
            end=end.date(),
            interval=Interval.parse(interval),
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="SYMBOL") from exc

    try:
        run_chart(request)
    except QtrnError as exc:
        logger.debug("chart %s failed: %s", request.symbol, exc)
        raise click.ClickException(str(exc)) from exc


def run_chart(request: ChartRequest):
    """Fetch the series for `request` and draw it until a key is pressed."""
    series = fetcher.fetch(request)
    if not series:
        raise EmptyResultError(f"no bars returned for {request.symbol}")
    chart.render(request.symbol, series)


def main():
    cli()


if __name__ == "__main__":
    main()
