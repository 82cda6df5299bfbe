"""
Size a futures trade from the command line.

Usage:
    python tools/size_trade.py --entry 100 --stop 95 --tp 110 --risk 50 --leverage 10
    python tools/size_trade.py --entry 95 --stop 100 --side short --portfolio 1000 --risk-pct 1 --fees
    python tools/size_trade.py --entry 100 --stop 95 --url http://127.0.0.1:8000 --json

Notes:
    - Without --url the calculation runs locally; with --url it is sent to POST /api/sizing.
    - Passing --portfolio switches to portfolio risk mode (risk = portfolio * risk-pct / 100).
    - Figures are rounded for display only: size to cents (floored), quantity to 6 decimals,
      margin up to the next whole dollar.
"""

import argparse
import json
import math
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.append(str(repo_root))

from riskguard.core.config import get_settings
from riskguard.core.logging import get_logger, init_logging
from riskguard.risk.risk_engine import PositionType, RiskMode, TradeParams, calculate_position_size

logger = get_logger("riskguard.tools.size_trade")


def build_params(args: argparse.Namespace) -> TradeParams:
    settings = get_settings()
    portfolio_mode = args.portfolio is not None
    return TradeParams(
        entry_price=args.entry,
        stop_loss_price=args.stop,
        take_profit_price=args.tp or 0.0,
        position_type=PositionType(args.side.upper()),
        risk_mode=RiskMode.PORTFOLIO if portfolio_mode else RiskMode.FIXED,
        risk_amount=settings.default_risk_amount if args.risk is None else args.risk,
        portfolio_size=args.portfolio if portfolio_mode else settings.default_portfolio_size,
        risk_percentage=settings.default_risk_pct if args.risk_pct is None else args.risk_pct,
        leverage=settings.default_leverage if args.leverage is None else args.leverage,
        include_fees=args.fees,
    )


def remote_sizing(url: str, params: TradeParams, timeout: float = 10.0) -> Dict[str, Any]:
    payload = asdict(params)
    payload["position_type"] = params.position_type.value
    payload["risk_mode"] = params.risk_mode.value
    resp = requests.post(url.rstrip("/") + "/api/sizing", json=payload, timeout=timeout)
    resp.raise_for_status()
    return resp.json()


def render(params: TradeParams, results: Dict[str, Any]) -> List[str]:
    if not results.get("is_valid"):
        return [f"Invalid: {results.get('error')}"]
    size = math.floor(results["position_size_usdt"] * 100) / 100
    lines = [
        f"Position size : ${size:,.2f}",
        f"Quantity      : {results['quantity']:,.6f}".rstrip("0").rstrip(".") + " units",
        f"Margin req.   : ${math.ceil(results['required_margin']):,} @{params.leverage:g}x",
        f"Risk          : ${results['actual_risk_amount']:,.2f} ({results['stop_loss_percentage']:.2f}% to SL)",
    ]
    if results["potential_profit"]:
        label = "Net profit" if params.include_fees else "Potential"
        sign = "+" if results["net_profit"] >= 0 else ""
        lines.append(f"R:R           : {results['risk_reward_ratio']:.2f}")
        lines.append(f"{label:<14}: {sign}${results['net_profit']:,.2f} ({results['take_profit_percentage']:.2f}% to TP)")
    if params.include_fees:
        lines.append(f"Fees          : -${results['estimated_fees']:,.2f}")
    return lines


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Leveraged futures position sizing")
    parser.add_argument("--entry", type=float, required=True)
    parser.add_argument("--stop", type=float, required=True)
    parser.add_argument("--tp", type=float, default=None)
    parser.add_argument("--side", choices=["long", "short", "LONG", "SHORT"], default="long")
    parser.add_argument("--risk", type=float, default=None, help="fixed dollar risk")
    parser.add_argument("--portfolio", type=float, default=None, help="portfolio size; enables percent risk")
    parser.add_argument("--risk-pct", type=float, default=None)
    parser.add_argument("--leverage", type=float, default=None)
    parser.add_argument("--fees", action="store_true", help="include 0.06%% taker fee per side")
    parser.add_argument("--url", default=None, help="base URL of a running RiskGuard server")
    parser.add_argument("--json", action="store_true", help="print raw results as JSON")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    init_logging(get_settings().log_level, structured=False)
    params = build_params(args)
    if args.url:
        try:
            results = remote_sizing(args.url, params)
        except requests.RequestException as exc:
            logger.error("remote_sizing_failed", extra={"event": "remote_sizing_failed", "url": args.url, "error": str(exc)})
            return 2
    else:
        results = asdict(calculate_position_size(params))

    if args.json:
        print(json.dumps(results, indent=2))
    else:
        print("\n".join(render(params, results)))
    return 0 if results.get("is_valid") else 1


if __name__ == "__main__":
    sys.exit(main())
