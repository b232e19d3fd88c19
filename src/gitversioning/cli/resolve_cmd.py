"""Implementation of the resolve command."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console

from gitversioning.config import ConfigError, ConfigLoader
from gitversioning.config.options import OPTION_GIT_BRANCH, OPTION_GIT_REF, OPTION_GIT_TAG, OPTION_PREFER_TAGS
from gitversioning.git import GitError, GitRepoContext, detect_override
from gitversioning.utils.cli_utils import exit_with_error, parse_parameters, properties_table, show_warning
from gitversioning.versioning import GitVersioningError, resolve_version
from gitversioning.versioning.driver import is_disabled

if TYPE_CHECKING:
	from gitversioning.versioning import ResolutionOutput

logger = logging.getLogger(__name__)

PathArg = Annotated[
	Path,
	typer.Argument(
		exists=True,
		file_okay=False,
		help="Path inside the git repository",
		show_default=True,
	),
]

ConfigOpt = Annotated[
	Path | None,
	typer.Option(
		"--config",
		"-c",
		help="Path to config file (defaults to .gitversioning.yml)",
	),
]

BranchOpt = Annotated[str | None, typer.Option("--branch", help="Version as if HEAD were on this branch")]

TagOpt = Annotated[str | None, typer.Option("--tag", help="Version as if HEAD were this tag (detached)")]

RefOpt = Annotated[
	str | None,
	typer.Option("--ref", help="Full ref to version as, e.g. refs/heads/main or refs/tags/v1.0.0"),
]

PreferTagsOpt = Annotated[
	bool | None,
	typer.Option("--prefer-tags/--no-prefer-tags", help="Use tag rules even when HEAD is on a branch"),
]

ProjectVersionOpt = Annotated[
	str | None,
	typer.Option("--project-version", help="Current project version, available as ${version}"),
]

DefineOpt = Annotated[
	list[str] | None,
	typer.Option("--define", "-D", help="Build parameter key=value, available as ${property.key}"),
]

JsonFlag = Annotated[bool, typer.Option("--json", help="Print the full result as JSON")]

PropertiesFlag = Annotated[bool, typer.Option("--properties", "-p", help="Print all resolved properties")]


def output_to_dict(output: ResolutionOutput) -> dict:
	"""Convert a resolution output into a JSON serializable dict."""
	return {
		"version": output.version,
		"properties": output.properties,
		"metadata": output.metadata,
		"ref": {"type": output.match.ref_type.value, "name": output.match.ref_name},
		"rule": output.match.rule.name,
		"update_properties_file": output.update_properties_file,
	}


def register_command(app: typer.Typer) -> None:
	"""Register the resolve command with the CLI app."""

	@app.command(name="resolve")
	def resolve_command(
		path: PathArg = Path(),
		config_file: ConfigOpt = None,
		branch: BranchOpt = None,
		tag: TagOpt = None,
		ref: RefOpt = None,
		prefer_tags: PreferTagsOpt = None,
		project_version: ProjectVersionOpt = None,
		define: DefineOpt = None,
		as_json: JsonFlag = False,
		show_properties: PropertiesFlag = False,
	) -> None:
		"""
		Resolve the project version for the current repository state.

		The version is printed to stdout. Use --json or --properties to see the
		rendered properties and git metadata as well.

		"""
		parameters = parse_parameters(define or [])
		for option, value in ((OPTION_GIT_BRANCH, branch), (OPTION_GIT_TAG, tag), (OPTION_GIT_REF, ref)):
			if value is not None:
				parameters[option] = value
		if prefer_tags is not None:
			parameters[OPTION_PREFER_TAGS] = str(prefer_tags).lower()

		try:
			context = GitRepoContext(path)
			config = ConfigLoader.get_instance(config_file, reload=True, repo_root=context.work_tree).get

			if is_disabled(config, parameters):
				if project_version is not None:
					typer.echo(project_version)
				return

			snapshot = context.get_snapshot()
			override = detect_override(parameters)
			if override is not None:
				snapshot = override.apply(snapshot)

			output = resolve_version(snapshot, config, parameters=parameters, project_version=project_version)
		except (GitError, ConfigError, GitVersioningError) as e:
			exit_with_error(f"Could not resolve version: {e}", exception=e)

		if output is None:
			show_warning("No versioning rule matched, version left unchanged.")
			if project_version is not None:
				typer.echo(project_version)
			return

		if as_json:
			typer.echo(json.dumps(output_to_dict(output), indent=2, sort_keys=True))
		elif show_properties:
			stdout = Console()
			stdout.print(properties_table(f"Version {output.version}", {**output.properties, **output.metadata}))
		else:
			typer.echo(output.version)
