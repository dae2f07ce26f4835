"""Handles interactive/command-line mode for the minilisp interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """minilisp interpreter shell."""
    intro = "minilisp interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self.line_num = 0

    def default(self, line):
        """Executes arbitrary minilisp expression. Lines with unclosed brackets are continued on the next line."""
        self.line_num += 1
        line, add_to_prev = self.sess.preprocess_line(line, self._tmp_line)

        if add_to_prev:
            self._tmp_line = line
            self.prompt = self.secondary_prompt
            return

        self._tmp_line = ""
        self.prompt = self._tmp_prompt

        self.sess.execute(line, self.line_num)  # errors are reported, cmd.Cmd would exit on them otherwise
        while self.sess.results:
            print(self.sess.pop())

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the minilisp interpreter!\n\n"
              "Every line is one expression. Numbers are 32-bit integers, and the built-ins are\n"
              "+, -, *, / and the booleans True and False. Special forms are define, lambda,\n"
              "eq? and cond.\n\n"
              "Try it out by typing '(define add2 (lambda (x y) (+ x y)))'. This binds a lambda\n"
              "to the name 'add2'. Next, try typing '(add2 3 4)', which gives 7, or '(add2)',\n"
              "which gives back the lambda itself so that it can be applied later.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
