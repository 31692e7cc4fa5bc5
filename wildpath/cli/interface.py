# wildpath/cli/interface.py
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import click
from click_option_group import optgroup
from rich.console import Console as RichConsole

from wildpath import __version__ as app_version
from wildpath.config.settings import (
    WalkConfig, SortMethod, OutputFormat, EntryType,
    DEFAULT_SORT_METHOD, DEFAULT_OUTPUT_FORMAT,
)
from wildpath.config.loader import load_and_merge_configs, select_config_values, build_walk_config
from wildpath.logging_setup import configure_logging, get_logger
from wildpath.core.discovery import split_path, resolve_base_dir, walk_wildcard_path
from wildpath.core.discovery.visitor import FilterLike
from wildpath.core.filters import (
    ExcludePatternFilter, GitignoreFilter, HiddenFilter, EntryTypeFilter, SizeFilter, all_of,
)
from wildpath.core.output import (
    describe_entries, sort_entries, format_matches, render_long_listing,
    write_to_stdout, write_to_file, copy_to_clipboard,
)
from wildpath.exceptions import WildPathError, ResolutionError

log = get_logger(__name__)

# cli parameter name -> WalkConfig attribute, for values given on the command line.
CLI_PARAM_TO_WALKCONFIG_ATTR_MAP: Dict[str, str] = {
    "follow_symlinks": "follow_symlinks",
    "exclude_patterns": "exclude_patterns",
    "respect_gitignore": "respect_gitignore",
    "include_hidden": "include_hidden",
    "entry_type_str": "entry_type",
    "min_size": "min_size",
    "max_size": "max_size",
    "case_sensitive": "case_sensitive",
    "sort_method_str": "sort_method",
    "output_format_str": "output_format",
    "absolute_paths": "absolute_paths",
    "output_file": "output_file",
    "clipboard": "clipboard",
    "show_summary": "show_summary",
}


def build_entry_filter(config: WalkConfig, root: Path) -> Optional[FilterLike]:
    # secondary filter chain for one pattern's resolved base directory.
    return all_of(
        ExcludePatternFilter(config.exclude_patterns, root) if config.exclude_patterns else None,
        GitignoreFilter(root) if config.respect_gitignore else None,
        HiddenFilter(root) if not config.include_hidden else None,
        EntryTypeFilter(config.entry_type) if config.entry_type is not EntryType.ANY else None,
        SizeFilter(config.min_size, config.max_size)
        if config.min_size is not None or config.max_size is not None
        else None,
    )


def collect_matches(config: WalkConfig) -> Tuple[List[Path], List[str]]:
    # lists every pattern, de-duplicating across patterns; returns matches and failed patterns.
    matches: List[Path] = []
    seen: Set[Path] = set()
    failed: List[str] = []
    cwd = str(config.cwd)

    for pattern in config.patterns or ["."]:
        split = split_path(pattern, cwd=cwd)
        found: List[Path] = []
        try:
            root = resolve_base_dir(split)
            walk_wildcard_path(
                split,
                follow_symlinks=config.follow_symlinks,
                file_filter=build_entry_filter(config, root),
                collected=found,
                case_sensitive=config.case_sensitive,
            )
        except ResolutionError as e:
            log.error("pattern_base_unresolvable", pattern=pattern, error=str(e))
            click.secho(f"Error: {pattern}: {e}", fg="red", err=True)
            failed.append(pattern)
            continue
        log.info("pattern_listed", pattern=pattern, matches=len(found))
        for path in found:
            if path not in seen:
                seen.add(path)
                matches.append(path)
    return matches, failed


def _run_listing_flow(config: WalkConfig) -> int:
    log.info("listing_flow_started", patterns=config.patterns)
    matches, failed = collect_matches(config)
    entries = sort_entries(describe_entries(matches, config.cwd, config.absolute_paths), config.sort_method)

    output_destination_used = False
    if config.output_format is OutputFormat.LONG and not (config.output_file or config.clipboard):
        render_long_listing(entries, RichConsole())
    else:
        output_to_write = format_matches(entries, config.output_format)
        if config.output_file:
            write_to_file(config.output_file, output_to_write)
            click.echo(f"Info: Output written to: {config.output_file}", err=True)
            output_destination_used = True

        clipboard_copy_succeeded = False
        if config.clipboard:
            if copy_to_clipboard(output_to_write):
                clipboard_copy_succeeded = True
                click.echo("Info: Matches copied to clipboard.", err=True)
            output_destination_used = True

        if not output_destination_used or (config.clipboard and not clipboard_copy_succeeded):
            if config.clipboard and not clipboard_copy_succeeded:
                click.echo("Info: Clipboard copy failed. Outputting to stdout instead.", err=True)
            write_to_stdout(output_to_write)

    if config.show_summary:
        click.secho("--- wildpath summary ---", fg="cyan", err=True)
        click.echo(f"Matched {len(entries)} entries from {len(config.patterns or ['.'])} pattern(s).", err=True)
        if failed:
            click.secho(f"Unresolvable patterns: {', '.join(failed)}", fg="yellow", err=True)

    return 1 if failed else 0


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.argument("patterns", nargs=-1)
@optgroup.group("Traversal Options", help="Control how the tree below each pattern is walked.")
@optgroup.option("-L", "--follow-symlinks", "follow_symlinks", is_flag=True, default=False, help="Follow symbolic links while descending.")
@optgroup.option("--case-sensitive/--ignore-case", "case_sensitive", default=True, help="Match the wildcard case-sensitively. Default: on.")
@optgroup.group("Filtering Options", help="Veto entries that already match the wildcard.")
@optgroup.option("-e", "--exclude", "exclude_patterns", multiple=True, help="Gitignore-style pattern of entries to drop (relative to the pattern's base directory).")
@optgroup.option("--gitignore", "respect_gitignore", is_flag=True, default=False, help="Drop entries ignored by .gitignore files below the base directory.")
@optgroup.option("--hidden/--no-hidden", "include_hidden", default=True, help="Include entries with dot-prefixed names. Default: on.")
@optgroup.option("--type", "entry_type_str", type=click.Choice([t.value for t in EntryType]), default=EntryType.ANY.value, help="Only report entries of this kind.")
@optgroup.option("--min-size", "min_size", type=click.IntRange(min=0), default=None, help="Minimum size in bytes.")
@optgroup.option("--max-size", "max_size", type=click.IntRange(min=0), default=None, help="Maximum size in bytes.")
@optgroup.group("Output Options", help="How matched entries are printed.")
@optgroup.option("-F", "--format", "output_format_str", type=click.Choice([f.value for f in OutputFormat]), default=DEFAULT_OUTPUT_FORMAT.value, help=f"Output format. Default: {DEFAULT_OUTPUT_FORMAT.value}.")
@optgroup.option("--sort", "sort_method_str", type=click.Choice([s.value for s in SortMethod]), default=DEFAULT_SORT_METHOD.value, help=f"Sort matches. Default: {DEFAULT_SORT_METHOD.value} (directory order).")
@optgroup.option("--absolute", "absolute_paths", is_flag=True, default=False, help="Print absolute paths instead of paths relative to the current directory.")
@optgroup.option("-o", "--output", "output_file", type=click.Path(dir_okay=False, writable=True, path_type=Path), default=None, help="Path to write the output to.")
@optgroup.option("--clipboard", "clipboard", is_flag=True, default=False, help="Copy output to clipboard.")
@optgroup.option("--summary/--no-summary", "show_summary", default=False, help="Print a match summary on stderr.")
@optgroup.group("Application Behavior", help="Configuration profiles and logging.")
@optgroup.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None, help="Read settings from this TOML file instead of the project config.")
@optgroup.option("--config-profile", "active_config_profile_name", default=None, help="Load a profile from config file(s).")
@optgroup.option("--verbose", "-v", "verbosity_level", count=True, help="Verbosity: -v info, -vv debug.")
@optgroup.option("--force-json-logs", "force_json_logs_cli", is_flag=True, default=False, help="Force JSON logs.")
@click.version_option(version=app_version, package_name="wildpath", prog_name="wildpath", help="Show version and exit.")
@click.pass_context
def main_cli(ctx: click.Context, patterns: tuple, **cli_params: Any):
    """wildpath: list files matching paths with embedded glob patterns,
    e.g. `wildpath 'src/**/*.py'`."""

    log_level = "warning"
    if cli_params.get("verbosity_level", 0) == 1: log_level = "info"
    elif cli_params.get("verbosity_level", 0) >= 2: log_level = "debug"
    configure_logging(log_level_str=log_level, force_json_logs=cli_params.get("force_json_logs_cli", False))

    log.debug("cli_command_invoked", patterns=list(patterns), params=cli_params)

    try:
        raw_configs_from_toml_files = load_and_merge_configs(config_file=cli_params.get("config_file"))
        effective_options = select_config_values(
            raw_configs_from_toml_files, cli_params.get("active_config_profile_name")
        )

        # command line values win over config files, defaults do not.
        for cli_name, attr in CLI_PARAM_TO_WALKCONFIG_ATTR_MAP.items():
            if ctx.get_parameter_source(cli_name) == click.core.ParameterSource.COMMANDLINE:
                value = cli_params[cli_name]
                effective_options[attr] = list(value) if isinstance(value, tuple) else value

        effective_options["patterns"] = list(patterns)
        final_config = build_walk_config(effective_options)
        exit_code = _run_listing_flow(final_config)
    except WildPathError as e:
        log.error("handled_application_error_in_cli", error_type=type(e).__name__, message=str(e))
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
    except Exception as e:
        log.critical("unexpected_critical_error_in_cli", message=str(e), exc_info=True)
        click.secho(f"Unexpected critical error: {e}. Please report this.", fg="red", err=True)
        sys.exit(1)

    ctx.exit(exit_code)
