"""
Task builder: turns task fields into the instruction text sent to the swarm.
"""

import json
from dataclasses import dataclass


INSTRUCTION_PREFIX = "finish the task as following\n"


@dataclass
class TaskForm:
    """Fields describing a task for the swarm."""

    task: str = "reply email"
    content: str = ""
    expectations: str = "Professional; concise"
    source: str = ""
    language: str = "en-US"

    def payload(self) -> dict[str, str]:
        # "Expections" is the key the server-side templates were written against
        return {
            "Task": self.task,
            "Content": self.content,
            "Expections": self.expectations,
            "Source": self.source,
            "Language": self.language,
        }


def build_instruction(form: TaskForm) -> str:
    """Render `form` as instruction text: fixed prefix plus compact JSON payload."""
    body = json.dumps(form.payload(), ensure_ascii=False, separators=(",", ":"))
    return INSTRUCTION_PREFIX + body
