import os
import random

from locust import HttpUser, task, constant

TARGET_HOST = os.getenv("LOCUST_TARGET_HOST", "http://127.0.0.1:8000")
TWO_SUM_ID = int(os.getenv("LOCUST_TWO_SUM_ID", "1"))
PALINDROME_ID = int(os.getenv("LOCUST_PALINDROME_ID", "2"))
BASE_API_PATH = "/api/v1"

PYTHON = 71
CPP = 54

AC_TWO_SUM_PYTHON = "a, b = map(int, input().split())\nprint(a + b)"
AC_TWO_SUM_CPP = "#include <iostream>\nint main() { long long a, b; std::cin >> a >> b; std::cout << a + b << std::endl; }"
AC_PALINDROME_PYTHON = "s = input().strip()\nprint('YES' if s == s[::-1] else 'NO')"
WA_PYTHON = "print('This is the wrong answer')"
TLE_PYTHON = "while True: pass"
TLE_CPP = "#include <iostream>\nint main() { while(true); return 0; }"
MLE_PYTHON = "a = []\nwhile True: a.append('A' * 1024 * 1024)"
RE_PYTHON_DIV_ZERO = "print(1/0)"
RE_CPP_SEGFAULT = "int main() { int *p = nullptr; *p = 42; return 0; }"
CE_CPP = "int main() { int x = ; return 0; }"


class JudgingUser(HttpUser):
    host = TARGET_HOST

    wait_time = constant(1)

    def _submit_code(self, problem_id: int, language_id: int, code: str, expected_verdict: str):
        payload = {
            "problem_id": problem_id,
            "language_id": language_id,
            "source_code": code,
        }

        request_name = f"{BASE_API_PATH}/submissions ({problem_id}_{expected_verdict})"

        with self.client.post(
                f"{BASE_API_PATH}/submissions/",
                json=payload,
                name=request_name,
                catch_response=True
        ) as response:
            if response.status_code != 200:
                response.failure(f"Submit failed for {request_name} with status {response.status_code}")
                return
            verdict = response.json().get("verdict")
            if verdict != expected_verdict:
                response.failure(f"{request_name}: expected {expected_verdict}, got {verdict}")

    @task(10)
    def submit_two_sum_ac(self):
        self._submit_code(TWO_SUM_ID, PYTHON, AC_TWO_SUM_PYTHON, "ACCEPTED")

    @task(5)
    def submit_two_sum_ac_cpp(self):
        self._submit_code(TWO_SUM_ID, CPP, AC_TWO_SUM_CPP, "ACCEPTED")

    @task(10)
    def submit_palindrome_ac(self):
        self._submit_code(PALINDROME_ID, PYTHON, AC_PALINDROME_PYTHON, "ACCEPTED")

    @task(5)
    def submit_wa(self):
        problem = random.choice([TWO_SUM_ID, PALINDROME_ID])
        self._submit_code(problem, PYTHON, WA_PYTHON, "WRONG_ANSWER")

    @task(3)
    def submit_python_tle(self):
        problem = random.choice([TWO_SUM_ID, PALINDROME_ID])
        self._submit_code(problem, PYTHON, TLE_PYTHON, "TIME_LIMIT_EXCEEDED")

    @task(3)
    def submit_cpp_tle(self):
        problem = random.choice([TWO_SUM_ID, PALINDROME_ID])
        self._submit_code(problem, CPP, TLE_CPP, "TIME_LIMIT_EXCEEDED")

    @task(2)
    def submit_python_re(self):
        problem = random.choice([TWO_SUM_ID, PALINDROME_ID])
        self._submit_code(problem, PYTHON, RE_PYTHON_DIV_ZERO, "RUNTIME_ERROR")

    @task(2)
    def submit_cpp_re(self):
        problem = random.choice([TWO_SUM_ID, PALINDROME_ID])
        self._submit_code(problem, CPP, RE_CPP_SEGFAULT, "RUNTIME_ERROR")

    @task(2)
    def submit_cpp_ce(self):
        problem = random.choice([TWO_SUM_ID, PALINDROME_ID])
        self._submit_code(problem, CPP, CE_CPP, "COMPILATION_ERROR")

    @task(1)
    def submit_python_mle(self):
        # only the docker backend enforces memory; the local backend reports TLE or RUNTIME_ERROR here
        problem = random.choice([TWO_SUM_ID, PALINDROME_ID])
        self._submit_code(problem, PYTHON, MLE_PYTHON, os.getenv("LOCUST_MLE_VERDICT", "MEMORY_LIMIT_EXCEEDED"))
