"""Example usage of the compatcheck engine."""

import json
from compatcheck import CompatEngine, CheckerConfig, snapshot_from_dict

# Release 1.0.0: a single order processing entry point
v1 = {
    "version": "1.0.0",
    "entities": [
        {
            "name": "OrderService",
            "kind": "interface",
            "members": [
                {"name": "processOrder", "kind": "method", "signature": ["Order"]},
                {"name": "findOrder", "kind": "method", "signature": ["String"]},
            ]
        },
        {
            "name": "Order",
            "kind": "data-class",
            "members": [
                {"name": "orderIdentifier", "kind": "field", "type": "String"},
                {"name": "total", "kind": "field", "type": "BigDecimal"},
            ]
        }
    ]
}

# Release 1.1.0: new names introduced, old ones deprecated for removal
v1_1 = {
    "version": "1.1.0",
    "entities": [
        {
            "name": "OrderService",
            "kind": "interface",
            "members": [
                {
                    "name": "processOrder",
                    "kind": "method",
                    "signature": ["Order"],
                    "deprecation": {"since": "1.1.0", "forRemoval": True, "targetVersion": "2.0.0"}
                },
                {"name": "createOrder", "kind": "method", "signature": ["Order"], "hasDefault": True},
                {
                    "name": "findOrder",
                    "kind": "method",
                    "signature": ["String"],
                    "deprecation": {"since": "1.1.0", "forRemoval": True}
                },
                {"name": "findOrder", "kind": "method", "signature": ["UUID"], "hasDefault": True},
            ]
        },
        {
            "name": "Order",
            "kind": "data-class",
            "members": [
                {
                    "name": "orderIdentifier",
                    "kind": "field",
                    "type": "String",
                    "deprecation": {"since": "1.1.0", "forRemoval": True}
                },
                {"name": "id", "kind": "field", "type": "UUID"},
                {"name": "total", "kind": "field", "type": "BigDecimal"},
            ]
        }
    ]
}

# Release 2.0.0: deprecated members removed, plus one careless removal
v2 = {
    "version": "2.0.0",
    "entities": [
        {
            "name": "OrderService",
            "kind": "interface",
            "members": [
                {"name": "createOrder", "kind": "method", "signature": ["Order"], "hasDefault": True},
                {"name": "findOrder", "kind": "method", "signature": ["UUID"], "hasDefault": True},
            ]
        },
        {
            "name": "Order",
            "kind": "data-class",
            "members": [
                {"name": "id", "kind": "field", "type": "UUID"},
            ]
        }
    ]
}


def main():
    snapshots = [snapshot_from_dict(doc) for doc in (v1, v1_1, v2)]
    engine = CompatEngine(CheckerConfig())

    print("=" * 60)
    print("Release history")
    print("=" * 60)
    for report in engine.check_history(snapshots):
        report.print_summary()
        print()

    print("=" * 60)
    print("1.1.0 -> 2.0.0 with the removed field acknowledged")
    print("=" * 60)
    config = CheckerConfig(allow_breaking=frozenset({"Order.total"}))
    report = CompatEngine(config).check(snapshots[1], snapshots[2])
    print(json.dumps(report.to_dict()["summary"], indent=2))


if __name__ == "__main__":
    main()
