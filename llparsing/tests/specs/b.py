"""
Statements with a dangling else.  The else_part conflict on ELSE is settled
by the precedence annotation: the ELSE branch binds to the nearest IF.
"""

grammar = """
%name Stmts;
%terminals IF THEN ELSE ID EQ NUM SEMI;
%precedence shift;

program   = stmt+;
stmt      = IF ID THEN stmt else_part
          | ID EQ NUM SEMI;
else_part = ELSE stmt [shift] | _;
"""
