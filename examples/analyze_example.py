"""Example: Analyze a meeting transcript directly with the library."""

import asyncio
import os

from meeting_insights import AnalyzerConfig, AnalyzerError, analyze_meeting


async def main():
    """Analyze a short transcript and print the structured result."""
    config = AnalyzerConfig(api_key=os.environ["ANTHROPIC_API_KEY"])

    transcript = (
        "Alice: Thanks for joining. We need to decide on the release date.\n"
        "Bob: QA signed off yesterday, so I think we can ship by Friday.\n"
        "Alice: Agreed, let's ship Friday. Bob, can you prepare the release notes?\n"
        "Bob: Sure, I'll have them ready Thursday."
    )

    print("Analyzing transcript...")
    try:
        result = await analyze_meeting(transcript, config)
    except AnalyzerError as e:
        print(f"Analysis failed: {e.message}")
        return

    print("\nAction items:")
    for item in result.action_items:
        deadline = item.deadline or "no deadline"
        print(f"  - {item.owner}: {item.task} ({deadline})")

    print("\nDecisions:")
    for decision in result.decisions:
        print(f"  - {decision}")

    print(f"\nSentiment: {result.sentiment}")


if __name__ == "__main__":
    asyncio.run(main())
