from catch_server import catch_feed, config, sheets
from catch_server.players import canonicalize, compare_key, dedupe_players, is_header_sentinel
from catch_server.selection import is_touchdown

gw = sheets.players_gateway()
cells = gw.read_column()

print(f"=== PLAYERS: {gw.store_id} col {gw.column} ===")
print(f"Raw rows: {len(cells)}")
seen = {}
for row, cell in enumerate(cells, start=1):
    name = canonicalize(cell)
    flag = ""
    if not name:
        flag = "BLANK"
    elif is_header_sentinel(name):
        flag = "HEADER"
    elif compare_key(name) in seen:
        flag = f"DUP of row {seen[compare_key(name)]}"
    else:
        seen[compare_key(name)] = row
    print(f"  {row:>4}: {cell!r:<30} {flag}")

print(f"\nListed players: {len(dedupe_players(cells))}")

if config.RECEIVERS_SHEET_URL:
    catches = catch_feed.fetch_column(config.RECEIVERS_SHEET_URL, config.CATCH_COLUMN)
    tds = [c for c in catches if is_touchdown(c)]
    print(f"\n=== CATCH FEED ({config.CATCH_COLUMN}) ===")
    print(f"Rows: {len(catches)}, touchdowns: {len(tds)} ({len(tds) / max(len(catches), 1):.0%} natural, "
          f"{config.CATCH_TOUCHDOWN_RATE:.0%} in sb mode)")
    for c in catches[:10]:
        print(f"  {'TD ' if is_touchdown(c) else '   '}{c}")
