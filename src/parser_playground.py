# src/parser_playground.py
import logging
from pprint import pprint

from cache import TTLCache
from config import load_settings
from llm_client import ExtractorUnavailable, build_model_extractor
from task_parser import TaskParser
from task_schema import CandidateTask
from time_utils import now_in_tz


def _apply_edit(task: CandidateTask, patch: dict) -> CandidateTask:
    fields = {k: v for k, v in patch.items() if k in ("title", "description", "tags", "priority")}
    return task.model_copy(update=fields)


def build_parser(settings) -> TaskParser:
    extractor = None
    try:
        extractor = build_model_extractor(settings, cache=TTLCache(settings.llm_cache_ttl_seconds))
    except ExtractorUnavailable:
        logging.info("OPENAI_API_KEY не задан: работаем только на правилах")
    return TaskParser(extractor, owner_names=settings.owner_names)


def main():
    settings = load_settings()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=settings.log_level.upper(),
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    parser = build_parser(settings)
    # Созданные в сессии задачи становятся кандидатами для правок
    tasks: list[CandidateTask] = []

    print("Task parser playground")
    print("Пиши фразы про задачи (например: 明天下午3点开会 紧急). Ctrl+C для выхода.\n")

    while True:
        try:
            text = input(">>> ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\nПока 👋")
            break

        if not text:
            continue

        outcome = parser.parse(text, tasks, now=now_in_tz(settings.timezone))

        print("\nРезультат разбора:")
        pprint(outcome.model_dump(), width=120, sort_dicts=False)

        if outcome.kind == "create":
            tasks.append(CandidateTask(id=len(tasks) + 1, **outcome.draft.model_dump(include={"title", "description", "tags", "priority"})))
        elif outcome.kind == "edit":
            tasks[:] = [_apply_edit(t, outcome.updates.to_patch()) if t.id == outcome.task_id else t for t in tasks]
        elif outcome.kind == "edit_ambiguous":
            for match in parser.suggest_matches(text, tasks):
                print(f"  ? {match.task.id}. {match.task.title} ({match.confidence:.0f}%: {match.reason})")
        print()


if __name__ == "__main__":
    main()
