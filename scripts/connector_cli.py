"""Command-line wrapper around the GitLab connector.

Handy for checking a configuration or poking at objects without a
governance host. Settings come from the same environment variables the
connector uses (GITLAB_HOST_URL, GITLAB_API_TOKEN, ...).

Examples:
    python scripts/connector_cli.py test
    python scripts/connector_cli.py list Project --page-size 20
    python scripts/connector_cli.py update __GROUP__ 61 --attr member=36 --attr member=37
"""
from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from gitlab_connector.config import load_settings
from gitlab_connector.core.connector import GitlabConnector
from gitlab_connector.core.exceptions import ConnectorError
from gitlab_connector.core.objects import (
    Attribute,
    ConnectorObject,
    EqualsFilter,
    GuardedString,
    ObjectClass,
    ObjectClassInfo,
    OperationOptions,
    PASSWORD,
    UID,
    Uid,
)


def _coerce(raw: str, info_type: type) -> Any:
    if info_type is bool:
        if raw.lower() not in {"true", "false"}:
            raise ValueError(f"expected true/false, got '{raw}'")
        return raw.lower() == "true"
    if info_type is int:
        return int(raw)
    return raw


def parse_attributes(pairs: List[str], info: ObjectClassInfo | None) -> List[Attribute]:
    """Turn ``name=value`` pairs into attributes, typed from the schema.

    A name given several times becomes a multi-valued attribute.
    """
    values: Dict[str, List[Any]] = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Invalid attribute '{pair}': expected name=value")
        name, raw = pair.split("=", 1)
        if name == PASSWORD:
            value: Any = GuardedString(raw)
        else:
            attr_info = info.attribute(name) if info else None
            value = _coerce(raw, attr_info.type if attr_info else str)
        values.setdefault(name, []).append(value)
    return [Attribute(name, vals) for name, vals in values.items()]


def object_to_dict(obj: ConnectorObject) -> Dict[str, Any]:
    return {
        "objectClass": obj.object_class.name,
        "uid": obj.uid,
        "name": obj.name,
        "attributes": obj.attributes,
    }


def schema_to_dict(connector: GitlabConnector) -> List[Dict[str, Any]]:
    return [
        {
            "type": oc.type,
            "attributes": [
                {
                    "name": a.name,
                    "type": a.type.__name__,
                    "required": a.required,
                    "updateable": a.updateable,
                    "multiValued": a.multi_valued,
                }
                for a in oc.attributes
            ],
        }
        for oc in connector.schema().object_classes
    ]


def main(argv: List[str] | None = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="GitLab connector helper")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("test", help="Check connectivity and credentials")
    sub.add_parser("schema", help="Print the connector schema")

    sl = sub.add_parser("list", help="List all objects of a class")
    sl.add_argument("object_class")
    sl.add_argument("--page-size", type=int)
    sl.add_argument("--no-members", action="store_true", help="Skip member lookups")

    sg = sub.add_parser("get", help="Fetch one object by UID")
    sg.add_argument("object_class")
    sg.add_argument("uid")

    sc = sub.add_parser("create")
    sc.add_argument("object_class")
    sc.add_argument("--attr", action="append", default=[], metavar="NAME=VALUE")

    su = sub.add_parser("update")
    su.add_argument("object_class")
    su.add_argument("uid")
    su.add_argument("--attr", action="append", default=[], metavar="NAME=VALUE")

    sd = sub.add_parser("delete")
    sd.add_argument("object_class")
    sd.add_argument("uid")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.cmd:
        parser.print_help()
        return 0

    connector = GitlabConnector()

    if args.cmd == "schema":
        print(json.dumps(schema_to_dict(connector), indent=2))
        return 0

    try:
        connector.init(load_settings())
        object_class = ObjectClass(args.object_class) if hasattr(args, "object_class") else None
        info = connector.schema().find(object_class) if object_class else None

        if args.cmd == "test":
            connector.test()
            print("OK")
        elif args.cmd == "list":
            attributes_to_get = None
            if args.no_members and info is not None:
                attributes_to_get = [a.name for a in info.attributes if a.name != "member"]
            options = OperationOptions(attributes_to_get=attributes_to_get, page_size=args.page_size)
            found = connector.search(object_class, options=options)
            print(json.dumps([object_to_dict(obj) for obj in found], indent=2))
        elif args.cmd == "get":
            found = connector.search(object_class, EqualsFilter(UID, args.uid))
            if not found:
                print(f"[get] {args.object_class} {args.uid} not found", file=sys.stderr)
                return 1
            print(json.dumps(object_to_dict(found[0]), indent=2))
        elif args.cmd == "create":
            uid = connector.create(object_class, parse_attributes(args.attr, info))
            print(uid.value)
        elif args.cmd == "update":
            uid = connector.update(object_class, Uid(args.uid), parse_attributes(args.attr, info))
            print(uid.value)
        elif args.cmd == "delete":
            connector.delete(object_class, Uid(args.uid))
    except ValueError as e:
        parser.error(str(e))
    except ConnectorError as e:
        print(f"[{args.cmd}] Error: {e}", file=sys.stderr)
        return 1
    finally:
        connector.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
