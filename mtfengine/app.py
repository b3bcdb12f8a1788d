# [ANCHOR:APP_DECISION_CLI]
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from mtfengine.analysis.adapter import snapshots_from_payload
from mtfengine.analysis.engine import DecisionEngine
from mtfengine.analysis.types import AuxSignals
from mtfengine.config.settings import load_env_chain


def setup_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    fmt = logging.Formatter("%(asctime)s %(levelname)-8s %(message)s")
    # stdout carries the decision JSON
    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(fmt)
    root.addHandler(ch)


def _aux_from(payload: dict, args) -> AuxSignals | None:
    raw = payload.get("aux") or {}
    imbalance = args.imbalance if args.imbalance is not None else raw.get("orderbookImbalance")
    flow = args.trade_flow or raw.get("tradeFlow")
    if imbalance is None and flow is None:
        return None
    return AuxSignals(orderbook_imbalance=float(imbalance) if imbalance is not None else None, trade_flow=flow)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Multi-timeframe trade decision for one symbol")
    parser.add_argument("snapshots", help="Path to JSON file keyed by timeframe (4h, 1h, 15m, ...)")
    parser.add_argument("--symbol", default=None, help="Instrument symbol (default: payload 'symbol')")
    parser.add_argument("--mode", default=None, help="STANDARD | AGGRESSIVE (default: ENGINE_MODE)")
    parser.add_argument("--strategy", default=None, help="Evaluate only this strategy (name or alias)")
    parser.add_argument("--imbalance", type=float, default=None, help="Order book imbalance in %%")
    parser.add_argument("--trade-flow", default=None, choices=("BUY", "SELL", "NEUTRAL"))
    args = parser.parse_args(argv)

    cfg = load_env_chain()
    setup_logging(cfg.LOG_LEVEL)

    payload = json.loads(Path(args.snapshots).read_text(encoding="utf-8"))
    symbol = args.symbol or payload.get("symbol", "UNKNOWN")
    snapshots = snapshots_from_payload(payload)

    decision = DecisionEngine(cfg).evaluate(symbol, snapshots, args.mode, _aux_from(payload, args), args.strategy)
    print(json.dumps(decision.to_dict(), indent=2, ensure_ascii=False))
    return 0 if decision.best_signal else 1


if __name__ == "__main__":
    sys.exit(main())
