from statement_engine import analyze, configure_logging
from statement_engine.reporting.charts import plot_monthly
from statement_engine.reporting.io import ensure_dirs, load_settings, load_statement
from statement_engine.reporting.report import response_tables, save_csv, save_excel, save_json


def main():
    configure_logging()
    s = load_settings()
    ensure_dirs(s)

    rows = load_statement(s.input_csv)
    response = analyze(s.meta, rows)

    save_json(response, s.output_dir / "statement_analysis.json")

    tables = response_tables(response)
    for name, t in tables.items():
        save_csv(t, s.tables_dir / f"{name}.csv")

    save_excel(tables, s.output_dir / "statement_analysis.xlsx")

    plot_monthly(
        tables["Monthly"],
        s.charts_dir / "monthly_income_expense.png",
        "Monthly Income vs Expense"
    )

    print("Analysis complete.")


if __name__ == "__main__":
    main()
