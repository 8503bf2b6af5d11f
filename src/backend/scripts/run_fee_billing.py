from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


_ensure_backend_on_path()

from adapters.fee_records import FeeExportError, load_fee_export  # noqa: E402
from adapters.invoices import InvoiceDocumentError, extract_invoices, load_invoice_uploads  # noqa: E402
from common.fee_rules.errors import RuleSetLoadError  # noqa: E402
from pipelines.fee_batch import FeeBatchResult, run_fee_batch  # noqa: E402
from pipelines.rule_config_store import JsonFileRuleConfigStore  # noqa: E402

logger = logging.getLogger("scripts.run_fee_billing")


def _money(value) -> str:
    return f"{value:,.2f}".replace(",", " ")


def build_payload(result: FeeBatchResult) -> dict:
    return {
        "billing": result.billing.model_dump(mode="json"),
        "competitions": [c.model_dump(mode="json") for c in result.competitions],
        "reconciliation": result.reconciliation.model_dump(mode="json") if result.reconciliation else None,
        "extraction": [e.model_dump(mode="json", exclude={"invoice"}) for e in result.extraction],
    }


def _write_markdown(result: FeeBatchResult, out_path: Path) -> None:
    billing = result.billing
    lines = [
        "# Fee Billing",
        "",
        f"Run: {billing.run_id}",
        f"Generated at: {billing.generated_at.isoformat()}",
        "",
        "## Rules",
    ]
    for rule in billing.rules:
        lines.append(f"- {rule.priority}: {rule.rule_name}")

    lines.extend(["", "## Totals by rule", "", "| Rule | Records | Fee | Runner | Club |", "|---|---:|---:|---:|---:|"])
    for totals in billing.totals.values():
        lines.append(
            f"| {totals.rule_name} | {totals.records} | {_money(totals.fee_amount)} | "
            f"{_money(totals.runner_pays_amount)} | {_money(totals.club_pays_amount)} |"
        )

    lines.extend(["", "## Competitions", "", "| Competition | Date | Records | Fee | Runner | Club |", "|---|---|---:|---:|---:|---:|"])
    for comp in result.competitions:
        lines.append(
            f"| {comp.competition_name} | {comp.competition_date} | {comp.record_count} | "
            f"{_money(comp.total_fee_amount)} | {_money(comp.total_runner_amount)} | {_money(comp.total_club_amount)} |"
        )

    errored = [r for r in billing.records if r.rule_errors]
    if errored:
        lines.extend(["", "## Rule errors"])
        for rec in errored:
            for err in rec.rule_errors:
                lines.append(f"- {rec.member_name} / {rec.competition_name}: {err.rule_id} ({err.stage}) {err.message}")

    recon = result.reconciliation
    if recon is not None:
        lines.extend(
            [
                "",
                "## Invoice reconciliation",
                "",
                "| Competition | Date | Fee total | Invoice | Invoice no. | Invoice amount | Difference |",
                "|---|---|---:|---|---|---:|---:|",
            ]
        )
        for row in recon.rows:
            amount = _money(row.invoice_amount) + (" (unreadable)" if row.amount_unparseable else "")
            lines.append(
                f"| {row.competition_name} | {row.competition_date} | {_money(row.competition_total)} | "
                f"{row.entry_name or row.source_file} | {row.invoice_number or ''} | {amount} | {_money(row.difference)} |"
            )
        if recon.unmatched_invoices:
            lines.extend(["", "### Unmatched invoices"])
            for item in recon.unmatched_invoices:
                inv = item.invoice
                lines.append(
                    f"- {inv.origin}: {inv.competition_name or '?'} {inv.date or '?'} "
                    f"{inv.total_amount or '?'} ({item.reason.value})"
                )
        if recon.undated_competitions:
            lines.extend(["", "### Competitions with unreadable dates"])
            for comp in recon.undated_competitions:
                lines.append(f"- {comp.competition_name}: {comp.competition_date!r}")

    failed = [e for e in result.extraction if e.status.value != "OK"]
    if failed:
        lines.extend(["", "## Invoice files not read"])
        for item in failed:
            name = f"{item.source_file}:{item.entry_name}" if item.entry_name else item.source_file
            lines.append(f"- {name}: {item.message}")

    out_path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Split competition fees between runners and the club and reconcile against invoices."
    )
    parser.add_argument("--fees", required=True, help="Path to the competition fee export (CSV).")
    parser.add_argument(
        "--invoices",
        nargs="*",
        default=None,
        help="Invoice PDFs and/or ZIP archives of PDFs to reconcile against.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Rule parameter JSON (defaults to $FEE_RULES_CONFIG_PATH or config/fee_rules.json).",
    )
    parser.add_argument("--output-dir", default=".", help="Directory for fee_billing.json and fee_billing.md.")
    parser.add_argument("--workers", type=int, default=4, help="Concurrent PDF text extractions.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO).")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    output_dir = Path(args.output_dir).resolve()
    output_dir.mkdir(parents=True, exist_ok=True)

    try:
        normalized = load_fee_export(args.fees)
        uploads = load_invoice_uploads(args.invoices) if args.invoices is not None else None
    except (FeeExportError, InvoiceDocumentError) as exc:
        logger.error("Billing aborted: %s", exc)
        return 2
    for skipped in normalized.skipped:
        where = f" ({skipped.column})" if skipped.column else ""
        logger.warning("Row %d%s skipped: %s", skipped.row_number, where, skipped.reason)

    extraction = ()
    if uploads is not None:
        extraction = extract_invoices(uploads, max_workers=args.workers)

    try:
        result = run_fee_batch(
            normalized.records,
            config_store=JsonFileRuleConfigStore(args.config),
            invoices=[] if args.invoices is not None else None,
            extraction=extraction,
        )
    except RuleSetLoadError as exc:
        logger.error("Billing aborted: %s", exc)
        return 2

    out_json = output_dir / "fee_billing.json"
    out_md = output_dir / "fee_billing.md"
    out_json.write_text(json.dumps(build_payload(result), indent=2, ensure_ascii=False), encoding="utf-8")
    _write_markdown(result, out_md)

    print(f"Wrote {out_json}")
    print(f"Wrote {out_md}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
