"""Operator prompts and the validation behind them."""

import logging
from typing import Callable, Union

from pydantic import BaseModel

logger = logging.getLogger(__name__)

Ask = Callable[[str], str]

DEFAULT_CA_NAME = "My CA"
DEFAULT_SERVER_NAME = "server"
DEFAULT_CLIENT_COUNT = 1


def default_client_name(index: int) -> str:
    return f"client{index}"


class ClientCount(BaseModel):
    value: int


class CountError(BaseModel):
    text: str

    @property
    def message(self) -> str:
        return f"{self.text}: invalid number."


def parse_client_count(text: str) -> Union[ClientCount, CountError]:
    """
    Validate the operator's answer to "how many clients".

    An empty answer means the default of one client. Anything else has to be
    a plain run of digits with a value above zero; signs, whitespace inside
    the number and non-digits are rejected.
    """
    text = text.strip()
    if not text:
        return ClientCount(value=DEFAULT_CLIENT_COUNT)
    if not text.isdigit() or not text.isascii():
        return CountError(text=text)
    value = int(text)
    if value <= 0:
        return CountError(text=text)
    return ClientCount(value=value)


def prompt_client_count(ask: Ask = input) -> int:
    question = f"How many client certificates do you want to generate? [{DEFAULT_CLIENT_COUNT}]: "
    while True:
        result = parse_client_count(ask(question))
        if isinstance(result, ClientCount):
            return result.value
        print(result.message)
        logger.debug("Rejected client count %r", result.text)


def prompt_name(ask: Ask, question: str, default: str) -> str:
    answer = ask(f"{question} [{default}]: ").strip()
    return answer if answer else default


def client_name_prompter(ask: Ask = input) -> Callable[[int], str]:
    def name_for(index: int) -> str:
        return prompt_name(ask, f"Enter client name [{index}]", default_client_name(index))
    return name_for
