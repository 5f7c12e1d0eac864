"""Minimal quickstart script for Cognitive Resolution.

The script resolves a handful of utterances, applies the facts each run
suggests to the snapshot used by the next run and prints the reasoning trace
of the last answer.
"""

from cognitive_resolution import CognitivePipeline, PersonalFactsView
from cognitive_resolution.diagnostics import DiagnosticsSuite

UTTERANCES = [
    "What is 2+3*4?",
    "What is 2 plus 3 plus 4?",
    "My name is Ron and I have 1 wife and 2 cats",
    "Do you remember my details?",
    "What is photosynthesis?",
    "Tell me a joke",
]


def main() -> None:
    pipeline = CognitivePipeline()
    facts = PersonalFactsView()

    response = None
    for utterance in UTTERANCES:
        response = pipeline.resolve(utterance, facts)
        facts = facts.with_suggestions(response.suggestions)
        print(f"> {utterance}")
        print(f"  {response.content}")
        print(f"  confidence={response.confidence:.2f} category={response.category} passes={response.iterations}")

    print(f"\nKnown facts: {dict(facts)}")
    if response is not None:
        print("\nReasoning trace of the last answer:")
        for line in response.reasoning:
            print(f"  {line}")

    result = DiagnosticsSuite(pipeline=pipeline).run()
    print(f"\nDiagnostics: {result.passed}/{len(result.outcomes)} probes matched")


if __name__ == "__main__":
    main()
