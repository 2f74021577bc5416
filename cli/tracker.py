#!/usr/bin/env python3
"""
Discovery Tracker CLI - Command-line client for the tracker API.

Usage:
    tracker configure                          # Set the API URL
    tracker problems list                      # List problems
    tracker problems create "brief"            # Create a problem
    tracker problems investigate 3 --on        # Flag problem 3 for research
    tracker research list 3                    # Research for problem 3
    tracker research approve 3 7               # Approve research 7 of problem 3
    tracker experiments add 3 "proposal"       # Propose an experiment
    tracker experiments complete 3 4 --url URL # Record a finished experiment
    tracker problems delete 3 --yes            # Delete without the confirmation prompt
"""

import os
import sys
import json
import argparse
from pathlib import Path
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple

import requests
from requests.exceptions import ConnectionError, Timeout
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

# Configuration
CONFIG_DIR = Path.home() / ".tracker"
CONFIG_FILE = CONFIG_DIR / "config.json"
DEFAULT_BASE_URL = "http://localhost:8000"

STATUS_STYLES = {
    "NOT STARTED": "dim",
    "IN PROGRESS": "yellow",
    "FINISHED": "green",
}

console = Console()


def print_error(text: str):
    """Print error message."""
    console.print(f"[red]Error:[/red] {text}")


def print_success(text: str):
    """Print success message."""
    console.print(f"[green]✓[/green] {text}")


def print_json(data: Any):
    """Print JSON data nicely formatted."""
    console.print_json(json.dumps(data, indent=2, default=str))


def load_config() -> dict:
    """Load configuration from file."""
    if CONFIG_FILE.exists():
        try:
            with open(CONFIG_FILE) as f:
                return json.load(f)
        except (OSError, ValueError):
            return {}
    return {}


def save_config(config: dict):
    """Save configuration to file."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    with open(CONFIG_FILE, "w") as f:
        json.dump(config, f, indent=2)


class TrackerClientError(Exception):
    """Raised when an API call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class QueryCache:
    """
    Results of GET calls keyed by entity collection.

    Keys are tuples such as ("problems",) or ("research", 3). Mutations
    invalidate the collections they touch, so the next read refetches.
    """

    def __init__(self):
        self._entries: Dict[Tuple[Hashable, ...], Any] = {}

    def get(self, key: Tuple[Hashable, ...], loader: Callable[[], Any]) -> Any:
        if key not in self._entries:
            self._entries[key] = loader()
        return self._entries[key]

    def invalidate(self, *keys: Tuple[Hashable, ...]) -> None:
        for key in keys:
            self._entries.pop(key, None)

    def __contains__(self, key) -> bool:
        return key in self._entries

    def clear(self) -> None:
        self._entries.clear()


class TrackerClient:
    """Discovery Tracker API Client."""

    def __init__(self, base_url: Optional[str] = None, timeout: float = 30):
        self.config = load_config()
        self.base_url = (
            base_url
            or os.getenv("TRACKER_API_URL")
            or self.config.get("base_url")
            or DEFAULT_BASE_URL
        ).rstrip("/")
        self.timeout = timeout
        self.cache = QueryCache()

    def configure(self, base_url: str):
        """Configure the client."""
        base_url = base_url.rstrip("/")
        if base_url != self.base_url:
            # Cached results belong to the previous server
            self.cache.clear()
        self.base_url = base_url
        save_config({"base_url": self.base_url})
        print_success(f"Configuration saved to {CONFIG_FILE}")

    def _request(self, method: str, endpoint: str, **kwargs) -> Any:
        """Make an API request."""
        url = f"{self.base_url}/api/v1{endpoint}"

        try:
            response = requests.request(
                method,
                url,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
                **kwargs
            )
            response.raise_for_status()
            return response.json() if response.content else {}
        except ConnectionError as e:
            raise TrackerClientError(f"Cannot connect to {self.base_url}") from e
        except Timeout as e:
            raise TrackerClientError("Request timed out") from e
        except requests.HTTPError as e:
            try:
                body = e.response.json()
            except ValueError:
                body = None
            error_detail = body.get("detail", str(e)) if isinstance(body, dict) else str(e)
            raise TrackerClientError(
                f"API error: {error_detail}", status_code=e.response.status_code
            ) from e

    def get(self, endpoint: str, **kwargs) -> Any:
        return self._request("GET", endpoint, **kwargs)

    def post(self, endpoint: str, **kwargs) -> Any:
        return self._request("POST", endpoint, **kwargs)

    def patch(self, endpoint: str, **kwargs) -> Any:
        return self._request("PATCH", endpoint, **kwargs)

    def delete(self, endpoint: str, **kwargs) -> Any:
        return self._request("DELETE", endpoint, **kwargs)

    def _invalidate_problem(self, problem_id: int, *children: str):
        # Problem documents embed their research and experiments
        keys = [("problems",), ("problems", "investigate"), ("problem", problem_id)]
        keys.extend((child, problem_id) for child in children)
        self.cache.invalidate(*keys)

    # ========== Problems ==========

    def list_problems(self) -> List[dict]:
        return self.cache.get(("problems",), lambda: self.get("/problems"))

    def list_problems_to_investigate(self) -> List[dict]:
        return self.cache.get(("problems", "investigate"), lambda: self.get("/problems/investigate"))

    def get_problem(self, problem_id: int) -> dict:
        return self.cache.get(("problem", problem_id), lambda: self.get(f"/problems/{problem_id}"))

    def create_problem(self, brief: str) -> dict:
        problem = self.post("/problems", json={"brief": brief})
        self.cache.invalidate(("problems",), ("problems", "investigate"))
        return problem

    def update_problem(self, problem_id: int, **fields) -> dict:
        problem = self.patch(f"/problems/{problem_id}", json=fields)
        self._invalidate_problem(problem_id)
        return problem

    def delete_problem(self, problem_id: int) -> dict:
        result = self.delete(f"/problems/{problem_id}")
        self._invalidate_problem(problem_id, "research", "experiments")
        return result

    # ========== Research ==========

    def list_research(self, problem_id: int) -> List[dict]:
        return self.cache.get(("research", problem_id), lambda: self.get(f"/problems/{problem_id}/research"))

    def add_research(self, problem_id: int, content: str) -> dict:
        research = self.post(f"/problems/{problem_id}/research", json={"content": content})
        self._invalidate_problem(problem_id, "research")
        return research

    def set_research_approval(self, problem_id: int, research_id: int, approved: bool) -> dict:
        research = self.patch(
            f"/problems/{problem_id}/research/{research_id}", json={"isApproved": approved}
        )
        self._invalidate_problem(problem_id, "research")
        return research

    def delete_research(self, problem_id: int, research_id: int) -> dict:
        result = self.delete(f"/problems/{problem_id}/research/{research_id}")
        self._invalidate_problem(problem_id, "research")
        return result

    # ========== Experiments ==========

    def list_experiments(self, problem_id: int) -> List[dict]:
        return self.cache.get(
            ("experiments", problem_id), lambda: self.get(f"/problems/{problem_id}/experiments")
        )

    def add_experiment(self, problem_id: int, proposal: str) -> dict:
        experiment = self.post(f"/problems/{problem_id}/experiments", json={"proposal": proposal})
        self._invalidate_problem(problem_id, "experiments")
        return experiment

    def update_experiment(self, problem_id: int, experiment_id: int, **fields) -> dict:
        experiment = self.patch(f"/problems/{problem_id}/experiments/{experiment_id}", json=fields)
        self._invalidate_problem(problem_id, "experiments")
        return experiment

    def delete_experiment(self, problem_id: int, experiment_id: int) -> dict:
        result = self.delete(f"/problems/{problem_id}/experiments/{experiment_id}")
        self._invalidate_problem(problem_id, "experiments")
        return result


# ========== Rendering ==========

def _yes_no(value: bool) -> str:
    return "[green]yes[/green]" if value else "[dim]no[/dim]"


def render_problems(problems: List[dict], title: str = "Problems"):
    table = Table(title=title)
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Brief", style="cyan", max_width=60)
    table.add_column("Investigate")
    table.add_column("Research", justify="right")
    table.add_column("Experiments", justify="right")

    for problem in problems:
        table.add_row(
            str(problem["id"]),
            problem["brief"],
            _yes_no(problem.get("isInvestigate")),
            str(len(problem.get("research") or [])),
            str(len(problem.get("experiments") or [])),
        )
    console.print(table)


def render_research(items: List[dict], problem_id: int):
    table = Table(title=f"Research for problem {problem_id}")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Content", max_width=70)
    table.add_column("Approved")
    for item in items:
        table.add_row(str(item["id"]), item["content"], _yes_no(item.get("isApproved")))
    console.print(table)


def render_experiments(items: List[dict], problem_id: int):
    table = Table(title=f"Experiments for problem {problem_id}")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Proposal", max_width=60)
    table.add_column("Approved")
    table.add_column("Status")
    table.add_column("URL", style="blue")
    for item in items:
        status = item.get("status", "")
        style = STATUS_STYLES.get(status, "")
        table.add_row(
            str(item["id"]),
            item["proposal"],
            _yes_no(item.get("isApproved")),
            f"[{style}]{status}[/{style}]" if style else status,
            item.get("url") or "",
        )
    console.print(table)


def render_problem(problem: dict):
    console.print(Panel.fit(
        f"[bold]{problem['brief']}[/bold]\n\n"
        f"ID: {problem['id']}\n"
        f"Investigate: {_yes_no(problem.get('isInvestigate'))}\n"
        f"Related experiments: {', '.join(problem.get('relatedExperiments') or []) or '-'}",
        title=f"Problem {problem['id']}"
    ))
    if problem.get("research"):
        render_research(problem["research"], problem["id"])
    if problem.get("experiments"):
        render_experiments(problem["experiments"], problem["id"])


# ========== CLI Commands ==========

def confirm_delete(args, prompt: str) -> bool:
    """Ask before deleting unless --yes was given."""
    if getattr(args, "yes", False):
        return True
    if Confirm.ask(prompt, default=False):
        return True
    console.print("[yellow]Cancelled[/yellow]")
    return False


def cmd_configure(client: TrackerClient, args):
    """Configure API connection."""
    base_url = args.base_url or Prompt.ask("API Base URL", default=client.base_url)
    client.configure(base_url)

    try:
        client._request("GET", "/problems")
        print_success("Connection successful!")
    except TrackerClientError as e:
        print_error(f"Connection test failed: {e.message}")


def cmd_problems(client: TrackerClient, args):
    if args.problems_command == "list":
        render_problems(client.list_problems())
    elif args.problems_command == "show":
        problem = client.get_problem(args.id)
        if args.json:
            print_json(problem)
        else:
            render_problem(problem)
    elif args.problems_command == "create":
        problem = client.create_problem(args.brief)
        print_success(f"Created problem {problem['id']}")
    elif args.problems_command == "update":
        fields: Dict[str, Any] = {}
        if args.brief is not None:
            fields["brief"] = args.brief
        if args.related is not None:
            fields["relatedExperiments"] = args.related
        if not fields:
            print_error("Nothing to update")
            return 1
        client.update_problem(args.id, **fields)
        print_success(f"Updated problem {args.id}")
    elif args.problems_command == "investigate":
        if args.flag is None:
            render_problems(client.list_problems_to_investigate(), title="Problems to investigate")
        else:
            client.update_problem(args.id, isInvestigate=args.flag)
            print_success(f"Problem {args.id} {'flagged' if args.flag else 'unflagged'} for investigation")
    elif args.problems_command == "delete":
        if not confirm_delete(args, f"Delete problem {args.id} and all of its research and experiments?"):
            return 0
        client.delete_problem(args.id)
        print_success(f"Deleted problem {args.id} with its research and experiments")
    return 0


def cmd_research(client: TrackerClient, args):
    if args.research_command == "list":
        render_research(client.list_research(args.problem_id), args.problem_id)
    elif args.research_command == "add":
        research = client.add_research(args.problem_id, args.content)
        print_success(f"Added research {research['id']} (awaiting approval)")
    elif args.research_command in ("approve", "reject"):
        approved = args.research_command == "approve"
        client.set_research_approval(args.problem_id, args.research_id, approved)
        print_success(f"Research {args.research_id} {'approved' if approved else 'rejected'}")
    elif args.research_command == "delete":
        if not confirm_delete(args, f"Delete research {args.research_id} of problem {args.problem_id}?"):
            return 0
        client.delete_research(args.problem_id, args.research_id)
        print_success(f"Deleted research {args.research_id}")
    return 0


def cmd_experiments(client: TrackerClient, args):
    command = args.experiments_command
    if command == "list":
        render_experiments(client.list_experiments(args.problem_id), args.problem_id)
    elif command == "add":
        experiment = client.add_experiment(args.problem_id, args.proposal)
        print_success(f"Proposed experiment {experiment['id']} (awaiting approval)")
    elif command in ("approve", "reject"):
        approved = command == "approve"
        client.update_experiment(args.problem_id, args.experiment_id, isApproved=approved)
        print_success(f"Experiment {args.experiment_id} {'approved' if approved else 'rejected'}")
    elif command == "start":
        experiment = client.update_experiment(args.problem_id, args.experiment_id, status="IN PROGRESS")
        print_success(f"Experiment {args.experiment_id} is {experiment['status']}")
    elif command == "complete":
        fields: Dict[str, Any] = {"status": "FINISHED"}
        if args.url:
            fields["url"] = args.url
        experiment = client.update_experiment(args.problem_id, args.experiment_id, **fields)
        print_success(f"Experiment {args.experiment_id} is {experiment['status']}")
    elif command == "delete":
        if not confirm_delete(args, f"Delete experiment {args.experiment_id} of problem {args.problem_id}?"):
            return 0
        client.delete_experiment(args.problem_id, args.experiment_id)
        print_success(f"Deleted experiment {args.experiment_id}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tracker",
        description="Discovery Tracker CLI - problems, research and experiments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tracker problems create "Users abandon checkout"
  tracker research add 1 "Users report confusing pricing"
  tracker research approve 1 1
  tracker experiments add 1 "A/B test simplified pricing page"
  tracker experiments complete 1 1 --url http://x/report
        """
    )
    parser.add_argument("--url", dest="api_url", help="API base URL (overrides config)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Configure
    configure_parser = subparsers.add_parser("configure", help="Configure API connection")
    configure_parser.add_argument("base_url", nargs="?", help="API base URL")

    # Problems
    problems_parser = subparsers.add_parser("problems", help="Problem management")
    problems_sub = problems_parser.add_subparsers(dest="problems_command")
    problems_sub.add_parser("list", help="List problems")
    show = problems_sub.add_parser("show", help="Show a problem with its research and experiments")
    show.add_argument("id", type=int)
    show.add_argument("--json", action="store_true", help="Print raw JSON")
    create = problems_sub.add_parser("create", help="Create a problem")
    create.add_argument("brief")
    update = problems_sub.add_parser("update", help="Update a problem")
    update.add_argument("id", type=int)
    update.add_argument("--brief")
    update.add_argument("--related", nargs="*", help="Related experiment references")
    investigate = problems_sub.add_parser(
        "investigate", help="List problems to investigate, or flag one with --on/--off"
    )
    investigate.add_argument("id", type=int, nargs="?")
    flag = investigate.add_mutually_exclusive_group()
    flag.add_argument("--on", dest="flag", action="store_const", const=True)
    flag.add_argument("--off", dest="flag", action="store_const", const=False)
    delete = problems_sub.add_parser("delete", help="Delete a problem")
    delete.add_argument("id", type=int)
    delete.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation prompt")

    # Research
    research_parser = subparsers.add_parser("research", help="Research findings")
    research_sub = research_parser.add_subparsers(dest="research_command")
    r_list = research_sub.add_parser("list", help="List research for a problem")
    r_list.add_argument("problem_id", type=int)
    r_add = research_sub.add_parser("add", help="Add a finding")
    r_add.add_argument("problem_id", type=int)
    r_add.add_argument("content")
    for name in ("approve", "reject", "delete"):
        r_cmd = research_sub.add_parser(name, help=f"{name.capitalize()} a finding")
        r_cmd.add_argument("problem_id", type=int)
        r_cmd.add_argument("research_id", type=int)
        if name == "delete":
            r_cmd.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation prompt")

    # Experiments
    experiments_parser = subparsers.add_parser("experiments", help="Experiments")
    experiments_sub = experiments_parser.add_subparsers(dest="experiments_command")
    e_list = experiments_sub.add_parser("list", help="List experiments for a problem")
    e_list.add_argument("problem_id", type=int)
    e_add = experiments_sub.add_parser("add", help="Propose an experiment")
    e_add.add_argument("problem_id", type=int)
    e_add.add_argument("proposal")
    for name in ("approve", "reject", "start", "complete", "delete"):
        e_cmd = experiments_sub.add_parser(name, help=f"{name.capitalize()} an experiment")
        e_cmd.add_argument("problem_id", type=int)
        e_cmd.add_argument("experiment_id", type=int)
        if name == "complete":
            e_cmd.add_argument("--url", help="Link to the results")
        if name == "delete":
            e_cmd.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation prompt")

    parser.set_defaults(
        _subparsers={
            "problems": (problems_parser, "problems_command", cmd_problems),
            "research": (research_parser, "research_command", cmd_research),
            "experiments": (experiments_parser, "experiments_command", cmd_experiments),
        }
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    client = TrackerClient(base_url=args.api_url)

    try:
        if args.command == "configure":
            cmd_configure(client, args)
            return 0

        sub_parser, dest, handler = args._subparsers[args.command]
        if not getattr(args, dest):
            sub_parser.print_help()
            return 0
        if args.command == "problems" and args.problems_command == "investigate":
            if args.flag is not None and args.id is None:
                print_error("A problem id is required with --on/--off")
                return 1
        return handler(client, args) or 0
    except TrackerClientError as e:
        print_error(e.message)
        return 1


if __name__ == "__main__":
    sys.exit(main())
