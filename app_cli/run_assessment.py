from __future__ import annotations
import argparse, logging, time
from learning_core.errors import PlatformError
from learning_core.formatting import format_time
from learning_core.scheduler import ManualScheduler
from learning_core.store import LearningPlatform


def ask(prompt: str) -> str:
    return input(prompt + " ").strip()


def pick_assessment(platform: LearningPlatform) -> str | None:
    items = platform.assessments
    for i, a in enumerate(items):
        score = f" [{a.score}%]" if a.score is not None else ""
        print(f"  [{i}] {a.title} - {len(a.questions)} questions, {a.time_limit} mins, {a.status}{score}")
    v = ask("Assessment index (g = generate, q = quit):")
    if v == "q":
        return None
    if v == "g":
        a = platform.generate_assessment()
        print(f"Generated: {a.title}")
        return pick_assessment(platform)
    if v.isdigit() and int(v) < len(items):
        return items[int(v)].id
    print("Enter a listed index.")
    return pick_assessment(platform)


def main():
    ap = argparse.ArgumentParser(description="Take an assessment in the terminal.")
    ap.add_argument("--verbose", action="store_true")
    a = ap.parse_args()
    logging.basicConfig(level=logging.INFO if a.verbose else logging.WARNING, format="[%(levelname)s] %(message)s")

    scheduler = ManualScheduler()
    platform = LearningPlatform(scheduler=scheduler)
    platform.subscribe(lambda note: print(f"\n** {note.title} {note.description}"))

    assessment_id = pick_assessment(platform)
    if assessment_id is None:
        return
    platform.start_attempt(assessment_id)
    assessment = platform.catalog.get(assessment_id)
    t0 = time.perf_counter()
    while platform.active_attempt is not None:
        at = platform.active_attempt
        q = platform.attempts.current_question()
        print(f"\n[{format_time(at.time_remaining_seconds)} left] "
              f"Question {at.current_question_index + 1} of {len(assessment.questions)}")
        if q is not None:
            print(f"({q.difficulty} | {q.topic}) {q.question}")
            for i, opt in enumerate(q.options):
                mark = "*" if at.answers.get(q.id) == i else " "
                print(f" {mark}[{i}] {opt}")
        v = ask("Answer index, n(ext), p(revious), s(ubmit), a(bandon):")
        # the countdown follows wall-clock time spent at the prompt
        now = time.perf_counter()
        scheduler.advance(now - t0)
        t0 = now
        if platform.active_attempt is None:
            break
        try:
            if v == "n": platform.advance("next")
            elif v == "p": platform.advance("previous")
            elif v == "s": platform.submit_attempt()
            elif v == "a":
                platform.abandon_attempt(); print("Attempt abandoned."); return
            elif v.isdigit() and q is not None: platform.record_answer(q.id, int(v))
            else: print("Unrecognized input.")
        except PlatformError as exc:
            print(f"! {exc.message}")

    res = platform.attempt_result(assessment_id)
    for row in res.review:
        ok = "correct" if row["correct"] else "wrong"
        print(f"  Q{row['questionId']}: {ok} (answer {row['correctAnswer']}) {row['explanation']}")


if __name__ == "__main__": main()
