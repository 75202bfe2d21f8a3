"""Example: Use the HTTP client against a running Meeting Insights service."""

import asyncio
import os

from meeting_insights import ApiResponseError, MeetingInsightsClient


async def main():
    """Submit a transcript, list stored analyses, then delete the new one."""
    base_url = os.environ.get("MEETING_INSIGHTS_URL", "http://127.0.0.1:8000")

    async with MeetingInsightsClient(base_url, api_key=os.environ.get("API_KEY")) as client:
        try:
            record = await client.analyze("Alice: let's ship by Friday. Bob: agreed.")
        except ApiResponseError as e:
            print(f"Analyze failed ({e.status_code}): {e.error}")
            if e.details:
                print(f"Details: {e.details}")
            return

        analysis_id = record["analysis"]["id"]
        print(f"Stored analysis {analysis_id} with sentiment {record['analysis']['sentiment']!r}")

        analyses = await client.list_analyses()
        print(f"\n{len(analyses)} stored analyses:")
        for item in analyses:
            print(f"  {item['created_at']}  {item['id']}  {item['transcript']['text'][:40]!r}")

        detail = await client.get_analysis(analysis_id)
        if detail is not None:
            print(f"\nDecisions: {detail['decisions']}")

        print(await client.delete_analysis(analysis_id))


if __name__ == "__main__":
    asyncio.run(main())
