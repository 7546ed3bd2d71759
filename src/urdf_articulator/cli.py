"""Command-line interface for URDF Articulator.

This module provides the CLI commands for the URDF Articulator package.
"""

import sys
import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from urdf_articulator import (
    __version__,
    ArticulationCompiler,
    CompilerConfig,
    DescriptionError,
)
from urdf_articulator.core.collision import CollisionLookup

# Initialize console for rich output
console = Console()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _load_config(config_file: Optional[Path], **overrides) -> CompilerConfig:
    config = CompilerConfig.from_yaml(config_file) if config_file else CompilerConfig()
    updates = {key: value for key, value in overrides.items() if value is not None}
    return CompilerConfig.from_dict({**config.model_dump(), **updates})


def _asset_lookup(asset_root: Optional[Path]) -> Optional[CollisionLookup]:
    if asset_root is None:
        return None

    def lookup(asset: str) -> Optional[str]:
        path = asset_root / asset
        return str(path) if path.is_file() else None

    return lookup


@click.group()
@click.version_option(version=__version__)
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose logging')
def main(verbose: bool) -> None:
    """URDF Articulator - compile robot descriptions into articulation trees.

    Parse URDF robot descriptions, resolve joint drives and collision
    geometry, and emit the node-creation sequence for a physics engine.
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Verbose logging enabled")


@main.command(name='compile')
@click.argument('description_file', type=click.Path(exists=True, path_type=Path))
@click.option('-c', '--config', 'config_file', type=click.Path(exists=True, path_type=Path),
              help='Compiler configuration YAML file')
@click.option('-o', '--output', type=click.Path(path_type=Path), help='Write the result to this YAML file')
@click.option('--up-axis', type=click.Choice(['y', 'z']), help='Up axis of the target engine')
@click.option('--collision-source', type=click.Choice(['engine-native', 'external-decomposition']),
              help='Collision asset naming convention')
@click.option('--prune/--no-prune', default=None, help='Remove redundant nodes')
@click.option('--asset-root', type=click.Path(exists=True, file_okay=False, path_type=Path),
              help='Resolve collision assets against this directory')
def compile_command(description_file: Path, config_file: Optional[Path], output: Optional[Path],
                    up_axis: Optional[str], collision_source: Optional[str], prune: Optional[bool],
                    asset_root: Optional[Path]) -> None:
    """Compile a robot description into a node-creation sequence.

    \b
    DESCRIPTION_FILE: Path to URDF file

    Examples:
        urdf-articulator compile robot.urdf -o robot.yaml
        urdf-articulator compile robot.urdf --up-axis z --no-prune
    """
    try:
        config = _load_config(config_file, up_axis=up_axis, collision_source=collision_source, prune=prune)
        compiler = ArticulationCompiler(config, collision_lookup=_asset_lookup(asset_root))
        robot = compiler.compile_file(description_file)
    except FileNotFoundError as e:
        console.print(f"[bold red]✗ Error:[/bold red] {e}")
        sys.exit(1)
    except DescriptionError as e:
        console.print(f"[bold red]✗ {e.kind}:[/bold red] {e}")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[bold red]✗ Configuration Error:[/bold red] {e}")
        sys.exit(1)

    if output:
        robot.to_yaml(output)
        console.print(f"[bold green]✓[/bold green] Compiled {robot.robot_name}: {len(robot.nodes)} nodes")
        console.print(f"  Saved to: {output}")
    else:
        click.echo(robot.to_json())

    sys.exit(0)


@main.command()
@click.argument('description_file', type=click.Path(exists=True, path_type=Path))
@click.option('-c', '--config', 'config_file', type=click.Path(exists=True, path_type=Path),
              help='Compiler configuration YAML file')
def inspect(description_file: Path, config_file: Optional[Path]) -> None:
    """Show the compiled kinematic tree of a robot description.

    \b
    DESCRIPTION_FILE: Path to URDF file

    Examples:
        urdf-articulator inspect robot.urdf
    """
    try:
        config = _load_config(config_file)
        robot = ArticulationCompiler(config).compile_file(description_file)
    except FileNotFoundError as e:
        console.print(f"[bold red]✗ Error:[/bold red] {e}")
        sys.exit(1)
    except DescriptionError as e:
        console.print(f"[bold red]✗ {e.kind}:[/bold red] {e}")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[bold red]✗ Configuration Error:[/bold red] {e}")
        sys.exit(1)

    table = Table(title=f"Kinematic Tree: {robot.robot_name}")
    table.add_column("Node", style="cyan", no_wrap=True)
    table.add_column("Parent", style="magenta")
    table.add_column("Joint")
    table.add_column("Drives")
    table.add_column("Limits")
    table.add_column("Mass", justify="right")
    table.add_column("Mesh")

    for node in robot.nodes:
        joint = node.joint
        limits = f"[{joint.lower_limit:.2f}, {joint.upper_limit:.2f}]" if joint and joint.has_limits else "-"
        table.add_row(
            node.name,
            node.parent or "-",
            joint.type if joint else "root",
            ", ".join(d.axis for d in joint.drives) if joint and joint.drives else "-",
            limits,
            f"{node.mass:.3f}",
            "✓" if node.visual else "-",
        )

    console.print(table)
    sys.exit(0)


@main.command()
def info() -> None:
    """Display information about URDF Articulator.

    Shows version, features, and usage information.
    """
    panel = Panel.fit(
        f"""[bold cyan]URDF Articulator[/bold cyan] v{__version__}

[bold]Features:[/bold]
  • Link, joint and material extraction
  • Kinematic tree construction and validation
  • Joint drive and limit resolution
  • Redundant node pruning
  • Collision geometry association

[bold]Commands:[/bold]
  • compile    Compile a robot description
  • inspect    Show the compiled kinematic tree
  • info       Show this information

[bold]Usage:[/bold]
  urdf-articulator --help
  urdf-articulator <command> --help""",
        title="[bold]URDF Articulator[/bold]",
        border_style="blue"
    )
    console.print(panel)
    sys.exit(0)


if __name__ == '__main__':
    main()
