"""Google Maps Scraper Application Package.

Collects business listings (name, phone, website, address, rating, review
count) from the virtualized Google Maps result feed by selecting each entry,
waiting for its detail view and reading the fields, until the feed is
exhausted or the operator stops it.

The application follows a modular architecture with separate concerns for:
- Document access (live Playwright page or parsed HTML snapshot)
- Field extraction, detail-view readiness and feed traversal
- Record storage and export
- Operator control through a Telegram bot or an unattended run
"""
