from settings import settings
import psycopg

DDL = '''
CREATE TABLE IF NOT EXISTS users (
    userid TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    password TEXT NOT NULL,
    artistname TEXT,
    usertype TEXT NOT NULL DEFAULT 'Artist' CHECK (usertype IN ('Artist', 'Admin')),
    venuename TEXT,
    location TEXT
);

CREATE TABLE IF NOT EXISTS calendareventrequests (
    requestid TEXT PRIMARY KEY,
    eventid TEXT NOT NULL UNIQUE,
    userid TEXT NOT NULL REFERENCES users (userid) ON DELETE CASCADE,
    status TEXT NOT NULL DEFAULT 'Pending',
    requestdate DATE,
    starttime TIMESTAMP WITH TIME ZONE,
    endtime TIMESTAMP WITH TIME ZONE,
    amount NUMERIC(10, 2),
    artistname TEXT,
    eventname TEXT
);

CREATE INDEX IF NOT EXISTS idx_requests_user ON calendareventrequests (userid);
CREATE INDEX IF NOT EXISTS idx_requests_status ON calendareventrequests (status);
'''

print('Connecting to', settings.database_uri())
with psycopg.connect(settings.database_uri(), connect_timeout=5) as conn:
    with conn.cursor() as cur:
        cur.execute(DDL)
    conn.commit()
print('DDL applied')
