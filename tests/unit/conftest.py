# tests/unit/conftest.py
"""Shared fixtures: a small composition file and a project on disk."""

import pytest

COMPOSITION = '''"use client"

import { Play } from "lucide-react"
import { useEffect, useState } from "react"

interface Track {
  id: string
  title: string
}

function MusicCard({ title }: { title: string }) {
  return (
    <div className="card">
      <p>{title}</p>
    </div>
  )
}

export default function MainContent() {
  const [tracks, setTracks] = useState<Track[]>([])

  useEffect(() => {
    fetch('/api/recently-played').then((res) => res.json()).then(setTracks)
  }, [])

  return (
    <div className="flex-1 overflow-y-auto">
      {/* Recently Played */}
      <section className="px-6 py-8">
        <h2 className="text-xl font-bold">Recently played</h2>
        <div className="grid">
          {tracks.map((track) => (
            <MusicCard key={track.id} title={track.title} />
          ))}
        </div>
      </section>

      {/* Top Tracks */}
      <section className="px-6 py-8">
        <h2 className="text-xl font-bold">Top Tracks</h2>
        <p>Coming soon, don't miss it</p>
      </section>

      <style jsx>{`
        .scrollbar-hide { display: none; }
      `}</style>
    </div>
  )
}
'''


@pytest.fixture
def composition() -> str:
    return COMPOSITION

SCHEMA = """import { sqliteTable, text, integer } from 'drizzle-orm/sqlite-core';

export const recentlyPlayed = sqliteTable('recently_played', {
  id: integer('id').primaryKey({ autoIncrement: true }),
  title: text('title').notNull(),
});
"""

CONNECTION = """import { drizzle } from 'drizzle-orm/better-sqlite3';
import Database from 'better-sqlite3';

const sqlite = new Database('sqlite.db');
export const db = drizzle(sqlite);
"""

RESPONSE = """Here you go.

// src/db/schema.ts
```ts
import { sqliteTable, text, integer } from 'drizzle-orm/sqlite-core';

export const topTracks = sqliteTable('top_tracks', {
  id: integer('id').primaryKey({ autoIncrement: true }),
  title: text('title').notNull(),
  plays: integer('plays'),
});
```

// src/components/top-tracks.tsx
```tsx
export default function TopTracks() {
  return <section><h2>Top Tracks</h2></section>;
}
```
"""


@pytest.fixture
def project(tmp_path, composition):
    """A minimal Next.js + Drizzle project on disk."""
    files = {
        "src/db/schema.ts": SCHEMA,
        "src/db/connection.ts": CONNECTION,
        "src/components/main-content.tsx": composition,
        "src/app/api/recently-played/route.ts": "export async function GET() {}\n",
        "package.json": '{"name": "spotify-clone"}\n',
    }
    for relative, content in files.items():
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return tmp_path


@pytest.fixture
def model_response() -> str:
    return RESPONSE
