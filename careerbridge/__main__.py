"""Command line entry point for CareerBridge."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from careerbridge import __version__
from careerbridge.config.settings import Settings
from careerbridge.errors import CareerBridgeError, InvalidInput
from careerbridge.utils.logging import configure_logging


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def _load_json(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def _print_json(payload: object) -> None:
    def _default(value: object):
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            return to_dict()
        model_dump = getattr(value, "model_dump", None)
        if callable(model_dump):
            return model_dump(mode="json")
        return str(value)

    print(json.dumps(payload, indent=2, default=_default, ensure_ascii=False))


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="careerbridge",
        description="CareerBridge: skill matching, gap analysis and career roadmaps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m careerbridge import seed.json
  python -m careerbridge jobs user-1 --level entry --limit 5
  python -m careerbridge gap user-1 --role "Backend Developer"
  python -m careerbridge roadmap generate user-1 "Data Engineer" --months 6
  python -m careerbridge advice ask user-1 "Should I learn Go or Rust next?"
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="SQLite database path (overrides settings)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands",
    )

    import_parser = subparsers.add_parser(
        "import",
        help="Load users, jobs and learning resources from a JSON file",
    )
    import_parser.add_argument(
        "file",
        type=Path,
        help='JSON object with optional "users", "jobs" and "resources" lists',
    )

    jobs_parser = subparsers.add_parser("jobs", help="Recommend jobs for a user")
    jobs_parser.add_argument("user_id")
    jobs_parser.add_argument(
        "--level", default=None, help="Experience level filter (entry, mid, ...)"
    )
    jobs_parser.add_argument(
        "--type", dest="job_type", default=None, help="Job type filter (full_time, ...)"
    )
    jobs_parser.add_argument("--limit", type=int, default=None)

    resources_parser = subparsers.add_parser(
        "resources", help="Recommend learning resources for a user"
    )
    resources_parser.add_argument("user_id")
    resources_parser.add_argument("--cost", default=None, help="free or paid")
    resources_parser.add_argument("--limit", type=int, default=None)

    gap_parser = subparsers.add_parser("gap", help="Analyze a user's skill gap")
    gap_parser.add_argument("user_id")
    target = gap_parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--role", default=None, help="Target role (matched on job titles)")
    target.add_argument(
        "--job-id",
        dest="job_ids",
        type=int,
        action="append",
        default=None,
        help="Target job id (repeatable)",
    )

    extract_parser = subparsers.add_parser(
        "extract", help="Extract skills from a CV text file with an AI provider"
    )
    extract_parser.add_argument("user_id")
    extract_parser.add_argument("cv_file", type=Path)
    extract_parser.add_argument("--provider", default=None, help="gemini or groq")
    extract_parser.add_argument(
        "--update-profile",
        action="store_true",
        help="Merge extracted skills and roles into the user's profile",
    )

    skills_parser = subparsers.add_parser(
        "skills", help="List a user's AI-extracted skills"
    )
    skills_parser.add_argument("user_id")

    profile_parser = subparsers.add_parser("profile", help="Show or update a profile")
    profile_sub = profile_parser.add_subparsers(dest="profile_cmd", required=True)
    profile_show = profile_sub.add_parser("show", help="Show a user's profile")
    profile_show.add_argument("user_id")
    profile_update = profile_sub.add_parser("update", help="Replace profile fields")
    profile_update.add_argument("user_id")
    profile_update.add_argument(
        "--skill", dest="skills", action="append", default=None, help="Repeatable"
    )
    profile_update.add_argument(
        "--role", dest="roles", action="append", default=None, help="Repeatable"
    )
    profile_update.add_argument("--level", default=None, help="Experience level")

    roadmap_parser = subparsers.add_parser("roadmap", help="Manage career roadmaps")
    roadmap_sub = roadmap_parser.add_subparsers(dest="roadmap_cmd", required=True)

    generate = roadmap_sub.add_parser("generate", help="Generate a roadmap with AI")
    generate.add_argument("user_id")
    generate.add_argument("target_role")
    generate.add_argument("--months", type=_positive_int, default=6)
    generate.add_argument("--hours", type=_positive_int, default=10)
    generate.add_argument("--provider", default=None, help="gemini or groq")
    generate.add_argument(
        "--no-current-skills",
        action="store_true",
        help="Do not tell the provider which skills the user already has",
    )

    roadmap_list = roadmap_sub.add_parser("list", help="List a user's roadmaps")
    roadmap_list.add_argument("user_id")

    show = roadmap_sub.add_parser("show", help="Show one roadmap")
    show.add_argument("user_id")
    show.add_argument("roadmap_id", type=int)

    progress = roadmap_sub.add_parser("progress", help="Record roadmap progress")
    progress.add_argument("user_id")
    progress.add_argument("roadmap_id", type=int)
    progress.add_argument("percentage", type=int)
    progress.add_argument(
        "--phase",
        dest="phases",
        type=int,
        action="append",
        default=[],
        help="Completed phase number (repeatable)",
    )
    progress.add_argument("--notes", default=None)

    delete = roadmap_sub.add_parser("delete", help="Delete a roadmap")
    delete.add_argument("user_id")
    delete.add_argument("roadmap_id", type=int)

    advice_parser = subparsers.add_parser(
        "advice", help="Career mentor and profile-writing help from AI"
    )
    advice_sub = advice_parser.add_subparsers(dest="advice_cmd", required=True)

    ask = advice_sub.add_parser("ask", help="Ask the career mentor a question")
    ask.add_argument("user_id")
    ask.add_argument("question")

    suggestions = advice_sub.add_parser(
        "suggestions", help="Suggest improvements to a public profile"
    )
    suggestions.add_argument("user_id")
    suggestions.add_argument(
        "--platform", default="linkedin", help="linkedin, github or portfolio"
    )

    summary = advice_sub.add_parser("summary", help="Write a professional summary")
    summary.add_argument("user_id")

    projects = advice_sub.add_parser(
        "projects", help="Rewrite project descriptions for a CV"
    )
    projects.add_argument("user_id")
    projects.add_argument("projects", nargs="+", metavar="DESCRIPTION")

    for advice_cmd in (ask, suggestions, summary, projects):
        advice_cmd.add_argument("--provider", default=None, help="gemini or groq")

    return parser


async def _import_records(repo, path: Path) -> dict:
    from careerbridge.storage.models import JobPosting, LearningResource, User

    try:
        data = _load_json(path)
        users = [User.from_dict(item) for item in data.get("users", [])]
        jobs = [JobPosting.from_dict(item) for item in data.get("jobs", [])]
        resources = [
            LearningResource.from_dict(item) for item in data.get("resources", [])
        ]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise InvalidInput(f"Invalid import file {path}: {e!r}", e) from e

    for user in users:
        await repo.insert_user(user)
    for job in jobs:
        await repo.insert_job(job)
    for resource in resources:
        await repo.insert_resource(resource)
    return {"users": len(users), "jobs": len(jobs), "resources": len(resources)}


async def _run(parsed: argparse.Namespace, settings: Settings) -> object:
    from careerbridge.storage.repository import CareerRepository

    repo = CareerRepository(settings.database_path, timeout=settings.database_timeout)
    await repo.initialize()
    try:
        if parsed.command == "import":
            return await _import_records(repo, parsed.file)

        if parsed.command in {"jobs", "resources", "gap"}:
            from careerbridge.matching.service import MatchingService

            matching = MatchingService(repo, settings)
            if parsed.command == "jobs":
                return await matching.recommend_jobs(
                    parsed.user_id,
                    experience_level=parsed.level,
                    job_type=parsed.job_type,
                    limit=parsed.limit,
                )
            if parsed.command == "resources":
                return await matching.recommend_resources(
                    parsed.user_id, cost=parsed.cost, limit=parsed.limit
                )
            target = parsed.role if parsed.role is not None else parsed.job_ids
            return await matching.analyze_skill_gap(parsed.user_id, target)

        if parsed.command in {"extract", "skills"}:
            from careerbridge.extraction.service import ExtractionService

            extraction = ExtractionService(repo, settings=settings)
            if parsed.command == "skills":
                return await extraction.list_extracted_skills(parsed.user_id)
            cv_text = parsed.cv_file.read_text(encoding="utf-8")
            return await extraction.extract_and_merge(
                parsed.user_id,
                cv_text,
                provider=parsed.provider,
                update_profile=parsed.update_profile,
            )

        if parsed.command == "profile":
            from careerbridge.profile.service import ProfileService

            profiles = ProfileService(repo)
            if parsed.profile_cmd == "show":
                return await profiles.get_profile(parsed.user_id)
            return await profiles.update_profile(
                parsed.user_id,
                skills=parsed.skills,
                target_roles=parsed.roles,
                experience_level=parsed.level,
            )

        if parsed.command == "advice":
            from careerbridge.advice.service import AdviceService

            advice = AdviceService(repo, settings=settings)
            if parsed.advice_cmd == "ask":
                return await advice.ask_mentor(
                    parsed.user_id, parsed.question, provider=parsed.provider
                )
            if parsed.advice_cmd == "suggestions":
                return await advice.suggest_profile_improvements(
                    parsed.user_id, platform=parsed.platform, provider=parsed.provider
                )
            if parsed.advice_cmd == "summary":
                return await advice.generate_professional_summary(
                    parsed.user_id, provider=parsed.provider
                )
            return await advice.improve_project_descriptions(
                parsed.user_id, parsed.projects, provider=parsed.provider
            )

        from careerbridge.roadmap.service import RoadmapService

        roadmaps = RoadmapService(repo, settings=settings)
        if parsed.roadmap_cmd == "generate":
            return await roadmaps.generate_roadmap(
                parsed.user_id,
                parsed.target_role,
                timeframe_months=parsed.months,
                learning_hours_per_week=parsed.hours,
                provider=parsed.provider,
                include_current_skills=not parsed.no_current_skills,
            )
        if parsed.roadmap_cmd == "list":
            return await roadmaps.list_roadmaps(parsed.user_id)
        if parsed.roadmap_cmd == "show":
            return await roadmaps.get_roadmap(parsed.roadmap_id, parsed.user_id)
        if parsed.roadmap_cmd == "progress":
            return await roadmaps.update_progress(
                parsed.roadmap_id,
                parsed.user_id,
                parsed.percentage,
                completed_phases=parsed.phases,
                notes=parsed.notes,
            )
        await roadmaps.delete_roadmap(parsed.roadmap_id, parsed.user_id)
        return {"deleted": parsed.roadmap_id}
    finally:
        await repo.close()


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    # Load settings
    try:
        settings = Settings()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    log_level = parsed.log_level or settings.log_level
    logger = configure_logging(level=log_level, log_file=settings.log_file)

    if parsed.command is None:
        parser.print_help()
        return 0

    if parsed.db is not None:
        settings.database_path = parsed.db

    for path_arg in ("file", "cv_file"):
        path = getattr(parsed, path_arg, None)
        if path is not None and not path.exists():
            print(f"Error: file not found: {path}", file=sys.stderr)
            return 1

    try:
        result = asyncio.run(_run(parsed, settings))
    except CareerBridgeError as e:
        logger.debug(f"{parsed.command} failed: {e}")
        print(f"Error: {e.public_message}", file=sys.stderr)
        return 1

    _print_json(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
