from commandeer import *

__prog__ = "demo"


class Serve(Command, id="serve", signature=[Option("port", help="port to listen on")]):
    def run(self, arguments):
        port = integer(self.option("port", arguments)) or 8080
        self.console.success("serving on port %d" % port)


@command("greet", [Value("name", help="who to greet"), Option("loud")], help="Say hello.")
def greet(self, arguments):
    name = self.value("name", arguments)
    if boolean(self.option("loud", arguments)):
        name = name.upper()
    self.console.info("hello " + name)


if __name__ == '__main__':
    Runner(shell=True, colorful=True).register([Serve(), greet]).run()
