from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any

from herb_ledger.contract import HerbContract, to_json_ready
from herb_ledger.errors import HerbLedgerError
from herb_ledger.hashing import sha256_file
from herb_ledger.settings import Settings, configure_logging
from herb_ledger.store import JsonlLedgerStore


def open_ledger(args) -> JsonlLedgerStore:
    return JsonlLedgerStore(os.path.join(args.out, args.ledger_file))

def contract_for(args) -> HerbContract:
    return HerbContract(validator=args.settings.validator())

def emit(obj: Any) -> None:
    print(json.dumps(to_json_ready(obj), indent=2))

def cmd_add(args):
    store = open_ledger(args)
    contract_for(args).add_herb(
        store, args.herb_id, args.name, args.scientific_name, args.farmer,
        args.quantity, args.latitude, args.longitude, args.region,
        args.place_name, args.growth_stage, args.planting_date,
    )
    print(f"✅ Herb {args.herb_id} registered (status Submitted)")

def cmd_update_stage(args):
    store = open_ledger(args)
    contract_for(args).update_growth_stage(store, args.herb_id, args.stage)
    print(f"✅ Herb {args.herb_id} growth stage -> {args.stage}")

def cmd_update_lab_report(args):
    lab_hash = args.hash
    if args.report:
        lab_hash, n = sha256_file(args.report)
        print(f"🔬 Hashed {args.report} ({n} bytes): {lab_hash}")
    store = open_ledger(args)
    contract_for(args).update_lab_report(store, args.herb_id, lab_hash, args.status)
    print(f"✅ Herb {args.herb_id} lab report recorded, status -> {args.status}")

def cmd_get(args):
    emit(contract_for(args).get_herb(open_ledger(args), args.herb_id))

def cmd_list(args):
    store = open_ledger(args)
    contract = contract_for(args)
    if args.region is not None:
        herbs = contract.query_herbs_by_region(store, args.region)
    elif args.name is not None:
        herbs = contract.query_herbs_by_name(store, args.name)
    else:
        herbs = contract.get_all_herbs(store)
    emit(herbs)
    print(f"📦 {len(herbs)} herb(s)", file=sys.stderr)

def cmd_exists(args):
    exists = contract_for(args).herb_exists(open_ledger(args), args.herb_id)
    print("true" if exists else "false")
    if not exists:
        raise SystemExit(1)

def cmd_history(args):
    emit(contract_for(args).get_history(open_ledger(args), args.herb_id))

def cmd_invoke(args):
    result = contract_for(args).invoke(open_ledger(args), args.transaction, args.args)
    if result is not None:
        print(json.dumps(result, indent=2))

def cmd_verify(args):
    store = open_ledger(args)
    if store.verify():
        print(f"✅ Ledger OK: {store.block_count()} block(s), tip {store.tip_hash()}")
    else:
        raise SystemExit("❌ Ledger hash chain is broken")

def cmd_hash_report(args):
    digest, n = sha256_file(args.report)
    print(digest)
    print(f"🔬 {args.report}: {n} bytes", file=sys.stderr)

def main(argv: list[str] | None = None) -> None:
    settings = Settings.load()

    p = argparse.ArgumentParser(prog="herb-ledger")
    p.add_argument("--out", default=settings.STATE_DIR, help="State directory (default: $HERB_LEDGER_STATE or ./state)")
    p.add_argument("--ledger-file", default=settings.LEDGER_FILE)
    p.add_argument("--log-level", default=settings.LOG_LEVEL)
    sub = p.add_subparsers(dest="cmd", required=True)

    # add
    a = sub.add_parser("add", help="Register a new herb lot")
    a.add_argument("herb_id")
    a.add_argument("--name", default="")
    a.add_argument("--scientific-name", default="")
    a.add_argument("--farmer", default="")
    a.add_argument("--quantity", default="")
    a.add_argument("--latitude", default="")
    a.add_argument("--longitude", default="")
    a.add_argument("--region", default="")
    a.add_argument("--place-name", default="")
    a.add_argument("--growth-stage", default="")
    a.add_argument("--planting-date", default="")
    a.set_defaults(func=cmd_add)

    # update-stage
    s = sub.add_parser("update-stage", help="Set the growth stage of a herb")
    s.add_argument("herb_id")
    s.add_argument("stage")
    s.set_defaults(func=cmd_update_stage)

    # update-lab-report
    lr = sub.add_parser("update-lab-report", help="Record a lab report hash and status")
    lr.add_argument("herb_id")
    g = lr.add_mutually_exclusive_group(required=True)
    g.add_argument("--hash", help="Lab report digest")
    g.add_argument("--report", help="Lab report file to hash with SHA-256")
    lr.add_argument("--status", required=True)
    lr.set_defaults(func=cmd_update_lab_report)

    # get
    gt = sub.add_parser("get", help="Show one herb")
    gt.add_argument("herb_id")
    gt.set_defaults(func=cmd_get)

    # list
    ls = sub.add_parser("list", help="List herbs (full ledger scan)")
    f = ls.add_mutually_exclusive_group()
    f.add_argument("--region", help="Exact region, case-insensitive")
    f.add_argument("--name", help="Substring of name or scientific name, case-insensitive")
    ls.set_defaults(func=cmd_list)

    # exists
    e = sub.add_parser("exists", help="Exit 0 if the herb exists, 1 otherwise")
    e.add_argument("herb_id")
    e.set_defaults(func=cmd_exists)

    # history
    h = sub.add_parser("history", help="Show the change history of a herb")
    h.add_argument("herb_id")
    h.set_defaults(func=cmd_history)

    # invoke
    i = sub.add_parser("invoke", help="Run a transaction by name with string arguments")
    i.add_argument("transaction", help="e.g. AddHerb, GetHerb, QueryHerbsByRegion")
    i.add_argument("args", nargs="*")
    i.set_defaults(func=cmd_invoke)

    # verify
    v = sub.add_parser("verify", help="Verify ledger hash chain")
    v.set_defaults(func=cmd_verify)

    # hash-report
    hr = sub.add_parser("hash-report", help="Print the SHA-256 of a lab report file")
    hr.add_argument("report")
    hr.set_defaults(func=cmd_hash_report)

    args = p.parse_args(argv)
    args.settings = settings
    configure_logging(args.log_level)
    try:
        args.func(args)
    except HerbLedgerError as e:
        raise SystemExit(f"❌ {type(e).__name__}: {e}")

if __name__ == "__main__":
    main()
