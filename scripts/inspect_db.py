import sys, sqlite3, os

COLUMNS = ('id', 'username', 'email', 'google_id', 'image')


def inspect(path, only_with_images=False):
    if not os.path.exists(path):
        print(f"File not found: {path}")
        return
    con = sqlite3.connect(path)
    con.row_factory = sqlite3.Row
    cur = con.cursor()

    cur.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='users'")
    if not cur.fetchone():
        print("No users table in", path)
        con.close()
        return

    query = f"SELECT {', '.join(COLUMNS)} FROM users"
    if only_with_images:
        query += " WHERE image IS NOT NULL"
    cur.execute(query + " ORDER BY id")
    rows = cur.fetchall()
    for r in rows:
        print(dict(r))
    if not rows:
        print("(no rows)")
    con.close()


if __name__ == '__main__':
    args = [a for a in sys.argv[1:] if a != '--with-images']
    if len(args) != 1:
        print("Usage: python3 inspect_db.py [--with-images] /path/to/snaps.db")
    else:
        inspect(args[0], only_with_images='--with-images' in sys.argv[1:])
