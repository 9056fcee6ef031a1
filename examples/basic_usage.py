"""Basic usage example for ReportForge.

needs a service account with read access to the view, set up in
reporting.yaml (or wherever REPORTFORGE_CONFIG points):

    reporting:
      service_account_id: reports@my-project.iam.gserviceaccount.com
      key_file: key.json
      application_name: ReportForge Demo

run with the view id as the only argument.
"""

import os
import sys
from dataclasses import dataclass
from datetime import date, timedelta

from reportforge import Dimensions, FilterOperator, Metrics, ReportingService
from reportforge.executor.duckdb_executor import ReportWarehouse
from reportforge.parser.loader import load_service_configuration


@dataclass
class CountrySessions:
    country: str
    sessions: int
    users: int


def main(view_id: str):
    """Demonstrate ReportForge capabilities."""
    service = ReportingService(
        load_service_configuration(os.environ.get("REPORTFORGE_CONFIG", "reporting.yaml"))
    )
    end = date.today() - timedelta(days=1)
    start = end - timedelta(days=27)

    print("=" * 60)
    print("ReportForge Demo")
    print("=" * 60)

    # 1. Sessions per country, busiest first
    print("\n1. Sessions by Country:")
    result = service.query(
        lambda b: b.with_profile_id(view_id)
        .for_date_range(start, end)
        .with_metrics(Metrics.SESSIONS, Metrics.USERS)
        .with_dimensions(Dimensions.COUNTRY)
        .sort_by(Metrics.SESSIONS, descending=True)
        .custom(lambda c: c.max_results(10))
    )
    if not result.success:
        print(f"   Query failed: {result.error.message}")
        return

    for row in result.data.to_objects(CountrySessions):
        print(f"   {row.country}: {row.sessions:,} sessions, {row.users:,} users")
    if result.is_sampled:
        print("   (sampled)")

    # 2. Filters - organic traffic from one country
    print("\n2. Daily Organic Sessions in Germany:")
    result = service.query(
        lambda b: b.with_profile_id(view_id)
        .for_date_range(start, end)
        .with_metrics(Metrics.SESSIONS)
        .with_dimensions(Dimensions.DATE)
        .filter_by(Dimensions.COUNTRY, FilterOperator.EQUALS, "Germany")
        .and_filter_by(Dimensions.MEDIUM, FilterOperator.EQUALS, "organic")
    )
    if result.success:
        for day, sessions in result.data.rows[:7]:
            print(f"   {day:%Y-%m-%d}: {sessions}")

    # 3. SQL over a merged report
    print("\n3. Sessions per Week (via SQL):")
    if result.success:
        with ReportWarehouse() as warehouse:
            warehouse.load("daily", result.data)
            weekly = warehouse.execute(
                "SELECT date_trunc('week', date) AS week, SUM(sessions) AS sessions "
                "FROM daily GROUP BY 1 ORDER BY 1"
            )
        for week, sessions in weekly.rows:
            print(f"   {week}: {sessions}")

    print("\n" + "=" * 60)
    print("Demo complete!")
    print("=" * 60)


if __name__ == "__main__":
    main(sys.argv[1])
