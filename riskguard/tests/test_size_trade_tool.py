import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
TOOLS_DIR = ROOT / "tools"
if str(TOOLS_DIR) not in sys.path:
    sys.path.insert(0, str(TOOLS_DIR))

from riskguard.risk.risk_engine import PositionType, RiskMode  # noqa: E402
import size_trade  # noqa: E402


def test_build_params_portfolio_mode():
    args = size_trade.parse_args(
        ["--entry", "95", "--stop", "100", "--side", "short", "--portfolio", "2000", "--risk-pct", "2", "--leverage", "5"]
    )
    params = size_trade.build_params(args)
    assert params.position_type == PositionType.SHORT
    assert params.risk_mode == RiskMode.PORTFOLIO
    assert params.portfolio_size == 2000
    assert params.risk_percentage == 2
    assert params.leverage == 5


def test_main_renders_rounded_figures(capsys):
    code = size_trade.main(["--entry", "100", "--stop", "95", "--tp", "110", "--risk", "50", "--leverage", "10"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Position size : $1,000.00" in out
    assert "Quantity      : 10 units" in out
    assert "Margin req.   : $100 @10x" in out
    assert "R:R           : 2.00" in out


def test_main_reports_invalid_params(capsys):
    code = size_trade.main(["--entry", "100", "--stop", "105", "--risk", "50", "--json"])
    data = json.loads(capsys.readouterr().out)
    assert code == 1
    assert data["is_valid"] is False
    assert data["error"] == "SL must be below Entry"
