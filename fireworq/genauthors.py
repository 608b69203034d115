"""Generates the list of authors from the git history and the mailmap."""

from __future__ import annotations

import argparse
import re
import subprocess
import sys
from dataclasses import dataclass
from typing import Iterable, Mapping
from urllib.parse import quote

import requests

MAILMAP_PATTERN = re.compile(r"^()([^<]*) +<([^>]*)>$")
CONTRIBUTION_PATTERN = re.compile(r"^([0-9]+)\t([^<]*) +<([^>]*)>$")

# Addresses whose commits are never credited (e.g. bots).
BOT_EMAILS: frozenset[str] = frozenset()

# Commits made before the history was published, keyed by e-mail address.
INITIAL_COMMITS: dict[str, int] = {}

# Organisations listed after the individual authors: (name, link) pairs.
ORGANIZATIONS: tuple[tuple[str, str], ...] = ()

GITHUB_SEARCH_USERS = "https://api.github.com/search/users"
GITHUB_PROFILE = "https://github.com/"
_BATCH_SIZE = 5
_SHORTLOG_COMMAND = ["/bin/bash", "-c", "git log | git shortlog -sne"]


@dataclass
class Contribution:
    """Commits credited to one author."""

    login: str = ""
    name: str = ""
    email: str = ""
    commits: int = 0


def parse_contribution(regex: re.Pattern[str], line: str) -> Contribution | None:
    """Parse a mailmap or shortlog line; return ``None`` if it does not qualify."""
    line = line.strip()
    if not line:
        return None

    m = regex.match(line)
    if m is None or len(m.groups()) < 3:
        return None

    email = m.group(3)
    if email in BOT_EMAILS:
        return None

    count = m.group(1)
    if count:
        try:
            commits = int(count)
        except ValueError:
            return None
    else:
        commits = INITIAL_COMMITS.get(email, 0)

    return Contribution(name=m.group(2), email=email, commits=commits)


def collect_contributions(mailmap: str, shortlog: str) -> dict[str, Contribution]:
    """Merge initial commits named in the mailmap with the shortlog counts."""
    contributions: dict[str, Contribution] = {}

    for line in mailmap.split("\n"):
        c = parse_contribution(MAILMAP_PATTERN, line)
        if c is None or c.commits <= 0:
            continue
        contributions.setdefault(c.email, c)

    for line in shortlog.split("\n"):
        c = parse_contribution(CONTRIBUTION_PATTERN, line)
        if c is None or c.commits <= 0:
            continue
        existing = contributions.get(c.email)
        if existing is not None:
            existing.commits += c.commits
        else:
            contributions[c.email] = c

    return contributions


def sort_contributions(contributions: Iterable[Contribution]) -> list[Contribution]:
    """Order by commits, most first, then by e-mail address."""
    return sorted(contributions, key=lambda c: (-c.commits, c.email))


def _search_logins(emails: list[str]) -> dict[str, str]:
    found: dict[str, str] = {}
    if not emails:
        return found

    queries = "%20OR%20".join(
        quote(email, safe="$&+,:;=@") + "%20in:email" for email in emails
    )
    response = requests.get(
        f"{GITHUB_SEARCH_USERS}?q={queries}",
        headers={"Accept": "application/vnd.github.v3.text-match+json"},
        timeout=30,
    )
    data = response.json()
    if not isinstance(data, dict):
        raise ValueError("unexpected search response")

    for user in data.get("items") or []:
        login = user.get("login", "")
        for match in user.get("text_matches") or []:
            fragment = match.get("fragment", "")
            found.setdefault(fragment, login)
    return found


def get_github_login_names(emails: list[str]) -> dict[str, str]:
    """Look up GitHub login names by e-mail address; failed lookups are skipped."""
    result: dict[str, str] = {}
    for start in range(0, len(emails), _BATCH_SIZE):
        try:
            found = _search_logins(emails[start : start + _BATCH_SIZE])
        except (requests.RequestException, ValueError, AttributeError):
            continue
        for email, login in found.items():
            result.setdefault(email, login)
    return result


_MARKDOWN_HEADER = """<!-- DO NOT MODIFY : this file is automatically generated by fireworq.genauthors -->

# Authors

This is the official list of Fireworq authors for copyright purposes.

## Individual Persons

|Name |E-mail  |GitHub|Commits |
|:----|:-------|:-----|-------:|
"""

_MARKDOWN_FOOTER = """
Items are automatically added by `git shortlog -sne`.  Please add rules to [`.mailmap`](.mailmap) to keep it canonical (see "MAPPING AUTHORS" section of `git help shortlog` for the notation of the rules).  E-mail field must match your public E-mail setting on your GitHub account if you wish to show your GitHub account name.
"""

_PLAIN_HEADER = """# This is the official list of Fireworq authors for copyright purposes.

# This file is automatically generated by
# fireworq.genauthors.  Items are automatically added by
# git shortlog -sne.  Please add rules to .mailmap to keep it
# canonical (see "MAPPING AUTHORS" section of git help shortlog for
# the notation of the rules).

# Individual Persons

"""


def _render_markdown(contributions: list[Contribution]) -> str:
    parts = [_MARKDOWN_HEADER]
    for c in contributions:
        github = f"[@{c.login}]({GITHUB_PROFILE}{c.login})" if c.login else ""
        parts.append(f"|{c.name}|<{c.email}>|{github}|{c.commits}|\n")
    parts.append(_MARKDOWN_FOOTER)
    if ORGANIZATIONS:
        parts.append("\n## Organizations\n\n")
        parts.extend(f"- [{name}]({link})\n" for name, link in ORGANIZATIONS)
        parts.append("\n")
    return "".join(parts)


def _render_plain(contributions: list[Contribution]) -> str:
    parts = [_PLAIN_HEADER]
    parts.extend(f"{c.name} <{c.email}>\n" for c in contributions)
    if ORGANIZATIONS:
        parts.append("\n## Organizations\n\n")
        parts.extend(f"{name}\n" for name, _ in ORGANIZATIONS)
    return "".join(parts)


def render(contributions: list[Contribution], output_format: str) -> str:
    """Render the author list as ``markdown``; any other format gives plain text."""
    if output_format == "markdown":
        return _render_markdown(contributions)
    return _render_plain(contributions)


def _apply_logins(contributions: Mapping[str, Contribution]) -> None:
    logins = get_github_login_names(list(contributions))
    for c in contributions.values():
        login = logins.get(c.email)
        if login is not None:
            c.login = login


def main(argv: list[str] | None = None) -> int:
    """Print the author list built from ``git shortlog`` and ``.mailmap``."""
    parser = argparse.ArgumentParser(prog="genauthors")
    parser.add_argument(
        "-format",
        "--format",
        dest="output_format",
        default="plain",
        help="The output format (markdown or plain).",
    )
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    try:
        shortlog = subprocess.run(
            _SHORTLOG_COMMAND, capture_output=True, check=True, text=True
        ).stdout
    except (subprocess.CalledProcessError, OSError) as exc:
        print(exc, file=sys.stderr)
        return 1

    try:
        with open(".mailmap", encoding="utf-8") as f:
            mailmap = f.read()
    except OSError as exc:
        print(exc, file=sys.stderr)
        return 1

    contributions = collect_contributions(mailmap, shortlog)
    items = sort_contributions(contributions.values())

    if args.output_format == "markdown":
        _apply_logins(contributions)

    sys.stdout.write(render(items, args.output_format))
    return 0


if __name__ == "__main__":
    sys.exit(main())