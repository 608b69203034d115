"""Generates the Markdown reference of configuration settings."""

from __future__ import annotations

import sys
from collections import defaultdict

from fireworq.descriptions import Item, descriptions

_INTRO = """<!-- DO NOT EDIT: this document is automatically generated by fireworq.gendoc -->

Configuration
=============

You can configure Fireworq by providing environment variables on
starting a daemon (for both docker-composed and manually-set-up
instances) or by specifying command line arguments (for a manual
setup).  Command line arguments precede the values of environment
variables.

The following variables/arguments are available.  Some of them are
applicable only to a [manual setup][section-manual-setup].
"""

_DOCKER_SECTION = """
## <a name="config-docker">Variables only Applicable to a Docker-composed Instance</a>

### <a name="env-port">`FIREWORQ_PORT`</a>

Default: `8080`

Specifies the port number of a daemon.
"""

_REFERENCES = """
[section-config-common]: #config-common
[section-config-manual-setup]: #config-manual-setup
[section-config-docker]: #config-docker
[section-manual-setup]: ./production.md#manual-setup
[section-graceful-restart]: ./production.md#graceful-restart

[api-put-queue]: ./api.md#api-put-queue
[api-put-routing]: ./api.md#api-put-routing
"""


def _environment_variable(item: Item) -> str:
    return "FIREWORQ_" + item.name.upper()


def _anchor_name(item: Item) -> str:
    return "env-" + item.name.replace("_", "-")


def _link_label(item: Item) -> str:
    return f"`{_environment_variable(item)}`, `{item.argument()}`"


def _link(item: Item) -> str:
    return f"[{_link_label(item)}](#{_anchor_name(item)})"


def _table_of_contents(items: list[Item]) -> str:
    return "".join(f"  - {_link(item)}\n" for item in items)


def _item_description(item: Item) -> str:
    parts = [f'### <a name="{_anchor_name(item)}">{_link_label(item)}</a>\n']
    if item.default_value:
        parts.append(f"Default: `{item.default_value}`\n")
    parts.append(item.description + "\n")
    return "".join(parts)


def config_doc() -> str:
    """Return the configuration reference as a Markdown document."""
    categorized: dict[str, list[Item]] = defaultdict(list)
    for item in descriptions():
        categorized[item.category].append(item)
    common = categorized["common"]
    manual = categorized["manual"]

    return "".join(
        [
            _INTRO,
            "\n",
            "- [Common Variables/Arguments][section-config-common]\n",
            _table_of_contents(common),
            "- [Variables/Arguments only Applicable to Manual Setup][section-config-manual-setup]\n",
            _table_of_contents(manual),
            "- [Variables only Applicable to a Docker-composed Instance][section-config-docker]\n",
            "  - [`FIREWORQ_PORT`](#env-port)\n",
            '\n## <a name="config-common">Common Variables/Arguments</a>\n',
            "".join(_item_description(item) for item in common),
            '\n## <a name="config-manual-setup">Variables/Arguments only Applicable to Manual Setup</a>\n',
            "".join(_item_description(item) for item in manual),
            _DOCKER_SECTION,
            _REFERENCES,
        ]
    )


def main(argv: list[str] | None = None) -> int:
    """Print the document of the given type; only ``config`` is known."""
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print("Usage: gendoc <type>", file=sys.stderr)
        return 1
    if args[0] == "config":
        sys.stdout.write(config_doc())
    return 0


if __name__ == "__main__":
    sys.exit(main())