import argparse
from rich.tree import Tree
from rich import print

from .config_loader import load_alerting_config_file
from .errors import AmcfgError
from .helpers import format_duration
from .models import AlertingConfig, AlertmanagerConfig


def receiver_to_tree(index: int, config: AlertmanagerConfig, tree: Tree) -> None:
    endpoints = config.endpoints_config
    node = tree.add(f"[bold blue]alertmanager #{index}[/bold blue]")

    node.add(f"[bold green]Scheme:[/bold green] [green]{endpoints.scheme}[/green]")
    if endpoints.path_prefix:
        node.add(
            f"[bold green]Path Prefix:[/bold green] [green]{endpoints.path_prefix}[/green]"
        )

    if endpoints.static_addresses:
        static_node = node.add("[bold yellow]Static Addresses[/bold yellow]")
        for address in endpoints.static_addresses:
            static_node.add(f"[yellow]{address}[/yellow]")

    if endpoints.file_sd_configs:
        sd_node = node.add("[bold magenta]File SD[/bold magenta]")
        for sd in endpoints.file_sd_configs:
            files_node = sd_node.add(
                f"[magenta]refresh every {format_duration(sd.refresh_interval)}[/magenta]"
            )
            for file_name in sd.files:
                files_node.add(f"[magenta]{file_name}[/magenta]")

    http = config.http_client_config
    if not http.basic_auth.is_empty():
        # Only the username; secrets stay off the screen.
        node.add(
            f"[bold cyan]Basic Auth:[/bold cyan] [cyan]{http.basic_auth.username}[/cyan]"
        )
    if http.bearer_token or http.bearer_token_file:
        node.add("[bold cyan]Bearer Token: set[/bold cyan]")
    if http.proxy_url:
        node.add(f"[bold cyan]Proxy:[/bold cyan] [cyan]{http.proxy_url}[/cyan]")

    node.add(
        f"[bold yellow]Timeout:[/bold yellow] [yellow]{format_duration(config.timeout)}[/yellow]"
    )


def alerting_tree(config: AlertingConfig) -> Tree:
    tree = Tree("[bold]Alertmanager Clients[/bold]")
    for i, alertmanager in enumerate(config.alertmanagers):
        receiver_to_tree(i, alertmanager, tree)
    return tree


def tree(args: argparse.Namespace) -> int:
    try:
        config = load_alerting_config_file(args.file_path)
    except FileNotFoundError:
        print(f"[red]Error: Config file not found: {args.file_path}[/red]")
        return 1
    except OSError as e:
        print(f"[red]Error reading config: {str(e)}[/red]")
        return 1
    except AmcfgError as e:
        print(f"[red]Error parsing config: {str(e)}[/red]")
        return 1

    if not config.alertmanagers:
        print("[red]No alertmanagers configured in the YAML file[/red]")
        return 1

    print(alerting_tree(config))
    return 0
