from rich import print
from rich.pretty import pprint

from cortana import *

commander = Cortana(shell=True, colorful=True, conf=("--config", "-c", unmarshal_json))


class Person(Record):
    name: str = Field("name")


class Greeting(Record):
    name: str = Field("--name, -n, cortana, say something to cortana")
    age: int = Field("--age, -, 18, say something to someone with certain age")
    location: str = Field("--location, -l, beijing, say something to someone lives in certain location")
    text: str = Field("text, -, -")


class Completion(Record):
    prefix: str = Field("prefix")


@commander.command("say hello cortana", brief="say hello to cortana")
def say_hello_cortana():
    print("hello cortana")


@commander.command("say hello", brief="say hello to anyone")
def say_hello_anyone():
    person = Person()
    if commander.parse(person):
        print("hello", person.name)


@commander.command("say", brief="say anything to anyone")
def say_anything():
    commander.title("Say anything to anyone")
    commander.description(
        "You can say anything you want to anyone, the person can be selected by using the name, age or "
        "location. You can even combine these conditions together to choose the person more effectively"
    )
    greeting = Greeting()
    if commander.parse(greeting):
        print(f"Say to {greeting.name} who is {greeting.age} year old and lives in {greeting.location} now:")
        print(greeting.text)


@commander.command("complete", brief="complete a command prefix")
def complete():
    commander.title("Complete a command")
    commander.description("return all the commands that has prefix")
    completion = Completion()
    if commander.parse(completion):
        for command in commander.complete(completion.prefix):
            print(f"{command.path}: {command.brief}")


@commander.command("debug", brief="show the commander state")
def debug():
    pprint(commander)
    pprint(commander.commands())


commander.alias("cortana", "say hello cortana")
commander.config("greeting.json", unmarshal_json)
commander.environ(EnvironUnmarshaler("greeting"))


if __name__ == '__main__':
    commander.launch()
