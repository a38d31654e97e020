#!/usr/bin/env python3
"""
Seed script — creates a realistic dataset for trying out the community API.

Creates:
  • 6 careers across 3 faculties
  • 10 users (7 students spread over the careers, 3 aspirants)
  • 3 testimonies + 2 questions per student, 2 questions per aspirant
  • Some comments and likes across posts
  • A few saved careers / saved posts per user

Run after the API is up:
  python scripts/seed_data.py --api-url http://localhost:8000

All IDs are printed so you can use them in curl commands.
"""
import argparse
import json
import random
import time
import urllib.request
import urllib.error
from dataclasses import dataclass


CAREERS = [
    ("Software Engineering", "software-engineering", "Engineering", ["technology", "programming"]),
    ("Civil Engineering", "civil-engineering", "Engineering", ["construction", "math"]),
    ("Psychology", "psychology", "Humanities", ["health", "people"]),
    ("Law", "law", "Humanities", ["justice", "reading"]),
    ("Biology", "biology", "Sciences", ["nature", "lab"]),
    ("Mathematics", "mathematics", "Sciences", ["math", "research"]),
]

BASE_USERS = [
    ("ana_dev", "Ana Torres", "software-engineering", 5),
    ("luis_bridges", "Luis Ramírez", "civil-engineering", 3),
    ("sofia_mind", "Sofía Herrera", "psychology", 7),
    ("diego_law", "Diego Castillo", "law", 2),
    ("maria_cells", "María López", "biology", 4),
    ("jorge_proofs", "Jorge Medina", "mathematics", 6),
    ("carla_code", "Carla Ruiz", "software-engineering", 1),
    ("pablo_future", "Pablo Núñez", None, None),
    ("elena_curious", "Elena Vega", None, None),
    ("tomas_applicant", "Tomás Ortiz", None, None),
]

TESTIMONIES = [
    "First semester was intense but the study groups made all the difference.",
    "The lab courses are where everything finally clicked for me.",
    "Professors are approachable if you go to office hours early in the term.",
    "Internships in the last year are the best part of the program.",
    "Expect a lot of reading; organising notes weekly saved me.",
    "The math foundation in the first two years pays off later.",
]

QUESTIONS = [
    "Is it possible to work part-time during the first year?",
    "Which electives would you recommend for someone interested in research?",
    "How hard is the admission exam for this career?",
    "Are there exchange programs with other universities?",
    "What laptop do you need for the coursework?",
]

COMMENTS = [
    "Thanks for sharing this!",
    "Same experience here.",
    "Great question, I was wondering the same.",
    "Office hours helped me a lot too.",
]


@dataclass
class ApiClient:
    base_url: str

    def _send(self, method: str, path: str, data: dict | None = None) -> dict:
        url = f"{self.base_url}{path}"
        body = json.dumps(data).encode() if data is not None else None
        req = urllib.request.Request(
            url, data=body, headers={"Content-Type": "application/json"}, method=method
        )
        try:
            with urllib.request.urlopen(req, timeout=10) as resp:
                raw = resp.read()
                return json.loads(raw) if raw else {}
        except urllib.error.HTTPError as e:
            print(f"  HTTP {e.code} on {method} {path}: {e.read().decode()}")
            return {}

    def post(self, path: str, data: dict) -> dict:
        return self._send("POST", path, data)

    def put(self, path: str) -> dict:
        return self._send("PUT", path)

    def get(self, path: str) -> dict:
        return self._send("GET", path)


def wait_for_api(client: ApiClient, retries: int = 15) -> None:
    print(f"Waiting for API at {client.base_url} ...")
    for i in range(retries):
        try:
            result = client.get("/health")
            if result.get("status") == "ok":
                print("  API is ready!\n")
                return
        except urllib.error.URLError:
            pass
        time.sleep(3)
    raise RuntimeError(f"API not reachable at {client.base_url} after {retries} retries")


def main(api_url: str) -> None:
    client = ApiClient(api_url)
    wait_for_api(client)

    # ── Careers ──────────────────────────────────────────────────────────
    print("Creating careers...")
    career_ids: dict[str, str] = {}
    for name, slug, faculty, tags in CAREERS:
        result = client.post(
            "/careers/", {"name": name, "slug": slug, "faculty_name": faculty, "tags": tags}
        )
        if not result:
            # Already seeded on a previous run
            result = client.get(f"/careers/{slug}")
        if result.get("career_id"):
            career_ids[slug] = result["career_id"]
            print(f"  ✓ {slug} ({result['career_id']})")

    # ── Users ────────────────────────────────────────────────────────────
    print("\nCreating users...")
    users: list[dict] = []
    for username, display_name, slug, semester in BASE_USERS:
        payload = {"username": username, "display_name": display_name}
        if slug:
            payload.update(role="STUDENT", career_id=career_ids.get(slug), semester=semester)
        else:
            payload["role"] = "ASPIRANT"
        result = client.post("/users/", payload)
        if result.get("user_id"):
            users.append(result)
            print(f"  ✓ {username} [{result['role']}] ({result['user_id']})")
        else:
            print(f"  ✗ Failed to create {username}")

    if not users:
        print("No users created — aborting")
        return

    # ── Posts ────────────────────────────────────────────────────────────
    print("\nCreating posts...")
    post_ids: list[str] = []
    all_career_ids = list(career_ids.values())
    for user in users:
        if user["role"] == "STUDENT":
            plan = [("TESTIMONY", t) for t in random.sample(TESTIMONIES, 3)]
            plan += [("QUESTION", q) for q in random.sample(QUESTIONS, 2)]
            careers_for_user = [user["career_id"]] * len(plan)
        else:
            plan = [("QUESTION", q) for q in random.sample(QUESTIONS, 2)]
            careers_for_user = random.sample(all_career_ids, len(plan))
        for (post_type, body), career_id in zip(plan, careers_for_user):
            result = client.post(
                "/posts/",
                {"user_id": user["user_id"], "career_id": career_id, "post_type": post_type, "body": body},
            )
            if result.get("post_id"):
                post_ids.append(result["post_id"])
    print(f"  ✓ {len(post_ids)} posts created")

    # ── Comments & likes ─────────────────────────────────────────────────
    print("\nAdding comments and likes...")
    comments = likes = 0
    for post_id in post_ids:
        for user in random.sample(users, k=random.randint(0, 3)):
            client.post(
                f"/posts/{post_id}/comments",
                {"user_id": user["user_id"], "body": random.choice(COMMENTS)},
            )
            comments += 1
        for user in random.sample(users, k=random.randint(0, 5)):
            client.post(f"/posts/{post_id}/like", {"user_id": user["user_id"]})
            likes += 1
    print(f"  ✓ {comments} comments, {likes} likes added")

    # ── Saved careers / posts ────────────────────────────────────────────
    print("\nSaving careers and posts...")
    for user in users:
        for career_id in random.sample(all_career_ids, k=2):
            client.put(f"/users/{user['user_id']}/saved-careers/{career_id}")
        for post_id in random.sample(post_ids, k=min(3, len(post_ids))):
            client.put(f"/users/{user['user_id']}/saved-posts/{post_id}")
    print("  ✓ Bookmarks created")

    # ── Print summary ────────────────────────────────────────────────────
    print("\n" + "=" * 60)
    print("Seed complete! Here are some commands to try:\n")
    u = users[0]["user_id"]
    print("# First page of the feed:")
    print(f"  curl -s '{api_url}/feed/?take=4&skip=0' | python3 -m json.tool\n")
    print("# Questions in the Software Engineering forum:")
    print(f"  curl -s '{api_url}/feed/?post_type=QUESTION&career_slug=software-engineering' | python3 -m json.tool\n")
    print(f"# User menu for '{users[0]['username']}':")
    print(f"  curl -s '{api_url}/users/{u}/menu' | python3 -m json.tool\n")
    print("# Check Jaeger traces: http://localhost:16686")
    print("# Check Prometheus: http://localhost:9090")
    print("=" * 60)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the University Community API")
    parser.add_argument("--api-url", default="http://localhost:8000", help="API base URL")
    args = parser.parse_args()
    main(args.api_url)
