"""
services/seed_data.py

기본 언어 / 코드 스니펫 / 업적 데이터와 초기화 함수.
이미 데이터가 있으면 건너뛴다 (여러 번 호출해도 안전).
"""

import json
import logging

from codetype.services.storage import Storage

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGES = [
    {"name": "python", "display_name": "Python", "icon": "🐍"},
    {"name": "javascript", "display_name": "JavaScript", "icon": "⚡"},
    {"name": "java", "display_name": "Java", "icon": "☕"},
    {"name": "cpp", "display_name": "C++", "icon": "⚙️"},
    {"name": "html", "display_name": "HTML/CSS", "icon": "🌐"},
]

DEFAULT_SNIPPETS: dict[str, list[dict[str, str]]] = {
    "python": [
        {
            "title": "Fibonacci Function",
            "difficulty": "intermediate",
            "code": """def calculate_fibonacci(n):
    # Calculate fibonacci sequence up to n
    if n <= 0:
        return []
    elif n == 1:
        return [0]
    sequence = [0, 1]
    for i in range(2, n):
        sequence.append(sequence[i-1] + sequence[i-2])
    return sequence""",
        },
        {
            "title": "Binary Search",
            "difficulty": "intermediate",
            "code": """def binary_search(arr, target):
    left, right = 0, len(arr) - 1

    while left <= right:
        mid = (left + right) // 2
        if arr[mid] == target:
            return mid
        elif arr[mid] < target:
            left = mid + 1
        else:
            right = mid - 1
    return -1""",
        },
        {
            "title": "List Comprehension",
            "difficulty": "beginner",
            "code": """numbers = [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]
evens = [x for x in numbers if x % 2 == 0]
squares = [x**2 for x in evens]
print(f"Even squares: {squares}")""",
        },
    ],
    "javascript": [
        {
            "title": "Array Methods",
            "difficulty": "beginner",
            "code": """const numbers = [1, 2, 3, 4, 5, 6, 7, 8, 9, 10];

const result = numbers
  .filter(n => n % 2 === 0)
  .map(n => n * n)
  .reduce((sum, n) => sum + n, 0);

console.log('Sum of even squares:', result);""",
        },
        {
            "title": "Async/Await Function",
            "difficulty": "intermediate",
            "code": """async function fetchUserData(userId) {
  try {
    const response = await fetch(`/api/users/${userId}`);

    if (!response.ok) {
      throw new Error('Failed to fetch user data');
    }

    const userData = await response.json();
    return userData;
  } catch (error) {
    console.error('Error:', error);
    throw error;
  }
}""",
        },
        {
            "title": "React Component",
            "difficulty": "intermediate",
            "code": """import React, { useState, useEffect } from 'react';

const UserProfile = ({ userId }) => {
  const [user, setUser] = useState(null);
  const [loading, setLoading] = useState(true);

  useEffect(() => {
    fetchUser(userId).then(userData => {
      setUser(userData);
      setLoading(false);
    });
  }, [userId]);

  if (loading) return <div>Loading...</div>;

  return (
    <div className="profile">
      <h1>{user.name}</h1>
      <p>{user.email}</p>
    </div>
  );
};""",
        },
    ],
    "java": [
        {
            "title": "ArrayList Implementation",
            "difficulty": "intermediate",
            "code": """import java.util.*;

public class UserManager {
    private List<User> users;

    public UserManager() {
        this.users = new ArrayList<>();
    }

    public void addUser(User user) {
        if (user != null && !users.contains(user)) {
            users.add(user);
        }
    }

    public List<User> getActiveUsers() {
        return users.stream()
                   .filter(User::isActive)
                   .collect(Collectors.toList());
    }
}""",
        },
        {
            "title": "Exception Handling",
            "difficulty": "advanced",
            "code": """public class FileProcessor {
    public String readFile(String filename) {
        try (BufferedReader reader = new BufferedReader(
                new FileReader(filename))) {

            StringBuilder content = new StringBuilder();
            String line;

            while ((line = reader.readLine()) != null) {
                content.append(line).append("\\n");
            }

            return content.toString();
        } catch (IOException e) {
            throw new RuntimeException("Failed to read file", e);
        }
    }
}""",
        },
    ],
    "cpp": [
        {
            "title": "Vector Operations",
            "difficulty": "intermediate",
            "code": """#include <vector>
#include <algorithm>
#include <iostream>

class NumberProcessor {
private:
    std::vector<int> numbers;

public:
    void addNumber(int num) {
        numbers.push_back(num);
    }

    void sortNumbers() {
        std::sort(numbers.begin(), numbers.end());
    }

    int findMax() {
        return *std::max_element(numbers.begin(), numbers.end());
    }
};""",
        },
        {
            "title": "Template Function",
            "difficulty": "advanced",
            "code": """#include <iostream>
#include <type_traits>

template<typename T>
typename std::enable_if<std::is_arithmetic<T>::value, T>::type
findMax(T a, T b) {
    return (a > b) ? a : b;
}

int main() {
    int x = 10, y = 20;
    std::cout << "Max: " << findMax(x, y) << std::endl;
    return 0;
}""",
        },
    ],
    "html": [
        {
            "title": "Responsive Card Component",
            "difficulty": "beginner",
            "code": """<div class="card">
  <div class="card-header">
    <img src="profile.jpg" alt="User Avatar" class="avatar">
    <h2 class="card-title">John Doe</h2>
  </div>

  <div class="card-footer">
    <button class="btn btn-primary">Connect</button>
    <button class="btn btn-secondary">Message</button>
  </div>
</div>""",
        },
        {
            "title": "CSS Grid Layout",
            "difficulty": "intermediate",
            "code": """.container {
  display: grid;
  grid-template-columns: repeat(auto-fit, minmax(300px, 1fr));
  gap: 2rem;
  padding: 2rem;
}

@media (max-width: 768px) {
  .container {
    grid-template-columns: 1fr;
    padding: 1rem;
  }
}""",
        },
    ],
}

DEFAULT_ACHIEVEMENTS = [
    {"name": "First Steps", "description": "Complete your first typing test", "icon": "🎯",
     "condition": {"metric": "total_tests", "gte": 1}},
    {"name": "Dedicated Coder", "description": "Complete 10 typing tests", "icon": "📚",
     "condition": {"metric": "total_tests", "gte": 10}},
    {"name": "Speed Demon", "description": "Reach 60 WPM in a single test", "icon": "⚡",
     "condition": {"metric": "wpm", "gte": 60}},
    {"name": "Lightning Fingers", "description": "Reach 100 WPM in a single test", "icon": "🚀",
     "condition": {"metric": "wpm", "gte": 100}},
    {"name": "Perfectionist", "description": "Finish a test with 100% accuracy", "icon": "💎",
     "condition": {"metric": "accuracy", "gte": 100}},
]


def initialize_default_data(storage: Storage) -> int:
    """
    기본 언어/스니펫/업적을 채운다.

    Returns:
        새로 추가한 스니펫 수.
    """
    languages = storage.get_languages()
    if not languages:
        for lang in DEFAULT_LANGUAGES:
            storage.create_language(**lang)
        languages = storage.get_languages()

    snippets_count = 0
    for lang in languages:
        to_insert = DEFAULT_SNIPPETS.get(lang.name)
        if not to_insert or storage.get_code_snippets(lang.id):
            continue
        for snippet in to_insert:
            storage.create_code_snippet(language_id=lang.id, **snippet)
            snippets_count += 1

    if not storage.get_achievements():
        for a in DEFAULT_ACHIEVEMENTS:
            storage.create_achievement(
                name=a["name"], description=a["description"], icon=a["icon"],
                condition=json.dumps(a["condition"]),
            )

    if snippets_count:
        logger.info(f"기본 스니펫 {snippets_count}개 초기화")
    return snippets_count
