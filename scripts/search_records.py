#!/usr/bin/env python3
"""Script to run searches against a running search API."""

import asyncio
import sys

import httpx


API_BASE_URL = "http://localhost:8000"

# Sample queries exercising free text, quotes and operators
SAMPLE_QUERIES = [
    "notice",
    "input tax credit",
    '"show cause"',
    "show_cause_notice.pdf",
    "tag:urgent",
    "uploader:priya",
    "case:CASE-100 hearing",
    "refund order",
]


async def search_api(
    client: httpx.AsyncClient,
    query: str,
    scope: str = "all",
    limit: int = 10,
    cursor: str | None = None,
) -> dict:
    """Send a search request to the API.

    Args:
        client: HTTP client
        query: Query string
        scope: Entity scope
        limit: Page size
        cursor: Cursor of the page to fetch

    Returns:
        Response data from API
    """
    params = {"q": query, "scope": scope, "limit": limit}
    if cursor:
        params["cursor"] = cursor

    response = await client.get(f"{API_BASE_URL}/api/v1/search", params=params)

    if response.status_code == 200:
        return response.json()
    else:
        print(f"Error: {response.status_code}")
        print(response.text)
        return None


def print_response(query: str, response: dict):
    """Print search results in a formatted way.

    Args:
        query: The query searched
        response: API response data
    """
    print(f"\n{'='*80}")
    print(f"Query: {query}")
    print(f"{'='*80}")

    if response.get("message"):
        print(f"\n{response['message']}")

    print(f"\n{response['total']} results")
    for i, result in enumerate(response["results"], 1):
        badges = ", ".join(result.get("badges") or [])
        print(f"\n  {i}. [{result['type']}] {result['title']} (score {result['score']:.0f})")
        if result.get("subtitle"):
            print(f"     {result['subtitle']}")
        if badges:
            print(f"     Badges: {badges}")
        print(f"     {result['url']}")

    if response.get("next_cursor"):
        print(f"\nMore results available (cursor {response['next_cursor']})")


async def interactive_mode(client: httpx.AsyncClient, scope: str):
    """Run in interactive mode, showing suggestions and results.

    Args:
        client: HTTP client
        scope: Entity scope for every search
    """
    print("\n" + "="*80)
    print(f"Interactive Search Mode (scope: {scope})")
    print("="*80)
    print("Enter your queries (or 'quit' to exit)")
    print()

    while True:
        try:
            query = input("Search: ").strip()

            if not query:
                continue

            if query.lower() in ['quit', 'exit', 'q']:
                print("Goodbye!")
                break

            suggestions = await client.get(
                f"{API_BASE_URL}/api/v1/search/suggest", params={"q": query}
            )
            if suggestions.status_code == 200 and suggestions.json():
                texts = [s["text"] for s in suggestions.json()]
                print(f"Suggestions: {', '.join(texts)}")

            response = await search_api(client, query, scope=scope)
            if response:
                print_response(query, response)

            print()

        except KeyboardInterrupt:
            print("\nGoodbye!")
            break
        except EOFError:
            break


async def sample_queries_mode(client: httpx.AsyncClient, scope: str):
    """Run sample queries from predefined list.

    Args:
        client: HTTP client
        scope: Entity scope for every search
    """
    print("\n" + "="*80)
    print("Running Sample Queries")
    print("="*80)

    for i, query in enumerate(SAMPLE_QUERIES, 1):
        print(f"\n[{i}/{len(SAMPLE_QUERIES)}] Searching...")
        response = await search_api(client, query, scope=scope)

        if response:
            print_response(query, response)

    history = await client.get(f"{API_BASE_URL}/api/v1/search/history")
    if history.status_code == 200:
        print(f"\n{'='*80}")
        print("Query history")
        print(f"{'='*80}")
        for item in history.json():
            print(
                f"  {item['query']:<30} {item['provider']:<5} "
                f"{item['result_count']:>4} results {item['duration']:>8.1f}ms"
            )


async def main():
    """Main function to run search script."""
    mode = "interactive"
    scope = "all"

    args = sys.argv[1:]
    if "--help" in args:
        print("Usage: python search_records.py [--sample|--interactive] [--scope SCOPE]")
        print()
        print("Modes:")
        print("  --interactive  Search interactively (default)")
        print("  --sample       Run predefined sample queries")
        print()
        print("Scopes: all, cases, clients, tasks, documents, hearings")
        sys.exit(0)
    if "--sample" in args:
        mode = "sample"
    if "--scope" in args:
        index = args.index("--scope")
        if index + 1 >= len(args):
            print("Error: --scope requires a value")
            sys.exit(1)
        scope = args[index + 1]

    async with httpx.AsyncClient(timeout=30.0) as client:
        # Check if API is running
        try:
            response = await client.get(f"{API_BASE_URL}/health")
            if response.status_code != 200:
                print("Error: API is not responding correctly")
                sys.exit(1)
        except httpx.ConnectError:
            print(f"Error: Cannot connect to API at {API_BASE_URL}")
            print("Make sure the API server is running:")
            print("  uvicorn app.main:app --reload")
            sys.exit(1)

        print(f"Search provider: {response.json().get('provider')}")

        stats = await client.get(f"{API_BASE_URL}/api/v1/search/index/stats")
        if stats.status_code == 200 and stats.json()["documents_count"] == 0:
            print("Warning: No documents found in the record stores")
            print("Seed some demo records first:")
            print("  python scripts/seed_demo_data.py")

        if mode == "sample":
            await sample_queries_mode(client, scope)
        else:
            await interactive_mode(client, scope)


if __name__ == "__main__":
    asyncio.run(main())
