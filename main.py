#!/usr/bin/env python3
"""
School Climate Report Agent

Loads configuration, turns an aggregated survey into an executive diagnosis
using Google's Gemini API, and provides a command-line entry point that runs
the analysis pipeline over one or more survey exports.

Usage:
    python main.py survey.csv [other.csv ...] [--export-suggestions out.csv] [--report]
"""

import argparse
import json
import os
from typing import List, Optional

import google.generativeai as genai
from dotenv import load_dotenv
from tqdm import tqdm

from pipeline import (AggregateView, EmptySurveyError, create_summary_json,
                      run_pipeline_from_file, suggestions_to_dataframe)

DEFAULT_MODEL = "gemini-2.5-flash"

FALLBACK_REPORT = (
    "## Executive Diagnosis\n\n"
    "Report generation is currently unavailable. "
    "Please refer to the dashboard indicators for key insights."
)


def load_config() -> bool:
    """
    Load environment variables and configure the Gemini client.

    Returns:
        bool: True if configuration is successful, False otherwise
    """
    try:
        load_dotenv()

        api_key = os.getenv('GEMINI_API_KEY')
        if not api_key:
            print("Error: GEMINI_API_KEY not found in environment variables.")
            print("Please create a .env file with your API key:")
            print("GEMINI_API_KEY='your_api_key_here'")
            return False

        genai.configure(api_key=api_key)
        print("✓ Gemini API configured successfully")
        return True

    except Exception as e:
        print(f"Error loading configuration: {e}")
        return False


def get_model_name() -> str:
    """Gemini model to use, overridable through GEMINI_MODEL."""
    return os.getenv('GEMINI_MODEL', DEFAULT_MODEL)


def build_report_prompt(view: AggregateView) -> str:
    """
    Build the consultant prompt from the aggregated survey.

    Args:
        view (AggregateView): Aggregated survey results

    Returns:
        str: Prompt text asking for a markdown diagnosis in Portuguese
    """
    summary = create_summary_json(view)
    data_json = json.dumps(summary, indent=2, ensure_ascii=False)

    return f"""Role: You are an expert consultant in school climate and educational psychology.

Objective: Write a short, direct executive diagnosis of a school community survey for the school leadership team. Write the report in Brazilian Portuguese.

The data below contains:
1. total_respondents and dimension_averages: scores on a 0-5 scale (safety, facilities, respect, mental_health, support)
2. violence_percentage: share of respondents who reported witnessing violence
3. safety_by_role: average safety score per respondent group
4. dispersion: whether each dimension shows consensus, moderate variation or polarization
5. sentiment and comment_sample: the community's own voice, anonymised

Strict formatting rules (markdown):
1. Use blockquote syntax (>) for the executive summary and for any critical vulnerability alert.
2. Present the critical points in a markdown TABLE with the columns | Area | Score | Impact |.
3. Present the action plan as a bulleted list, each item starting with a bold action name.

Desired structure:
## Section title (use emojis)
> Executive summary...

## Critical Points
| Area | Score | Impact |
| :--- | :---: | :--- |

## Action Plan
* **Action 1:** Detail...

Data for Analysis:
{data_json}"""


def generate_school_report(view: AggregateView) -> str:
    """
    Generate the executive diagnosis for an aggregated survey.

    Args:
        view (AggregateView): Aggregated survey results

    Returns:
        str: Markdown report, or a fallback notice if the API is unavailable
    """
    if not load_config():
        return FALLBACK_REPORT

    try:
        print("\n📝 EXECUTIVE DIAGNOSIS GENERATION")
        print("-" * 50)

        prompt = build_report_prompt(view)
        print(f"   📏 Prompt size: ~{len(prompt):,} characters")

        model = genai.GenerativeModel(get_model_name())
        response = model.generate_content(prompt)

        report = (response.text or "").strip()
        if not report:
            raise ValueError("No content generated")

        print(f"✅ Report generated ({len(report)} characters)")
        return report

    except Exception as e:
        print(f"Warning: Failed to generate report: {e}")
        return FALLBACK_REPORT


def print_dashboard(view: AggregateView) -> None:
    """Print the headline indicators of an aggregated survey."""
    print(f"\n   Respondents: {view.total}")
    for dimension, average in view.dimension_averages.items():
        print(f"   {dimension:<14} {average:.1f} / 5")
    print(f"   violence       {view.violence_percentage:.1f}%")

    print("\n   Safety by role:")
    for group in view.safety_by_role:
        print(f"      {group.role}: {group.average_safety:.1f} (n={group.respondents})")

    print("\n   Dispersion:")
    for stat in view.advanced_stats:
        print(f"      {stat.metric}: mean {stat.mean:.2f}, median {stat.median:.2f}, "
              f"mode {stat.mode:g}, sd {stat.std_dev:.2f} -> {stat.interpretation}")

    print(f"\n   Suggestions: {len(view.suggestions)} "
          f"({view.sentiment.positive}% positive, {view.sentiment.neutral}% neutral, "
          f"{view.sentiment.negative}% negative)")


def export_suggestions(view: AggregateView, output_path: str) -> str:
    """Write all classified suggestions to a CSV file and return its path."""
    df = suggestions_to_dataframe(view)
    df.to_csv(output_path, index=False)
    print(f"✓ Saved {len(df)} suggestions to: {output_path}")
    return output_path


def main(argv: Optional[List[str]] = None):
    """
    Main function to run the survey analysis from the command line.
    """
    parser = argparse.ArgumentParser(description='Analyze school climate survey exports')
    parser.add_argument('files', nargs='+', help='Survey CSV export(s)')
    parser.add_argument('--export-suggestions', help='Write classified suggestions to this CSV '
                                                     '(suffixed per file when several are given)')
    parser.add_argument('--report', action='store_true', help='Generate the AI executive diagnosis')
    args = parser.parse_args(argv)

    print("=== School Climate Survey Analysis ===\n")

    for input_file in tqdm(args.files, desc="Surveys"):
        if not os.path.exists(input_file):
            print(f"Error: File '{input_file}' not found.")
            continue

        try:
            view = run_pipeline_from_file(input_file)
        except EmptySurveyError as e:
            print(f"Error: {input_file}: {e}")
            continue

        print(f"\n=== {input_file} ===")
        print_dashboard(view)

        if args.export_suggestions:
            output_path = args.export_suggestions
            if len(args.files) > 1:
                base_name = os.path.splitext(os.path.basename(input_file))[0]
                root, ext = os.path.splitext(output_path)
                output_path = f"{root}_{base_name}{ext or '.csv'}"
            export_suggestions(view, output_path)

        if args.report:
            print(generate_school_report(view))


if __name__ == "__main__":
    main()
